"""Command line entry points exposed as the ``portal-crypto`` script."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Iterator, Sequence, TextIO

from pydantic import ValidationError

from portal_crypto import get_version
from portal_crypto.config import get_settings
from portal_crypto.crypto import ConfigurationError, EncryptionError, EnvelopeCipher
from portal_crypto.schemas import EnvelopeCheck
from portal_crypto.services import EnvelopeValidator, RedisEnvelopeScanner, build_report
from portal_crypto.storage import RedisFactory

logger = logging.getLogger("portal_crypto.audit")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2

DEFAULT_REPORT = "encryption-validation-report.json"


def _configure_logging() -> None:
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _read_value(value: str | None, stream: TextIO) -> str:
    if value is not None:
        return value
    return stream.read().rstrip("\r\n")


def _iter_lines(stream: TextIO, name: str) -> Iterator[tuple[str, str]]:
    for number, line in enumerate(stream, start=1):
        value = line.strip()
        if value:
            yield f"{name}:{number}", value


def _input_checks(validator: EnvelopeValidator, path: str | None) -> list[EnvelopeCheck]:
    if path is None or path == "-":
        return validator.validate_many(_iter_lines(sys.stdin, "stdin"))
    with Path(path).expanduser().open(encoding="utf-8") as stream:
        return validator.validate_many(_iter_lines(stream, path))


async def _redis_checks(validator: EnvelopeValidator) -> list[EnvelopeCheck]:
    try:
        return await RedisEnvelopeScanner(validator).scan()
    finally:
        await RedisFactory.close()


def generate_key(args: argparse.Namespace) -> int:
    print(EnvelopeCipher.generate_key())
    return EXIT_OK


def encrypt(args: argparse.Namespace) -> int:
    cipher = EnvelopeCipher.from_settings(get_settings())
    print(cipher.encrypt(_read_value(args.text, sys.stdin)))
    return EXIT_OK


def decrypt(args: argparse.Namespace) -> int:
    cipher = EnvelopeCipher.from_settings(get_settings())
    print(cipher.decrypt(_read_value(args.envelope, sys.stdin).strip()))
    return EXIT_OK


def validate(args: argparse.Namespace) -> int:
    cipher = EnvelopeCipher.from_settings(get_settings()) if args.deep else None
    validator = EnvelopeValidator(cipher)

    checks: list[EnvelopeCheck]
    if args.redis:
        checks = asyncio.run(_redis_checks(validator))
    else:
        checks = _input_checks(validator, args.input)

    report = build_report(checks)
    output = Path(args.output).expanduser()
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(report.model_dump_json(by_alias=True, indent=2) + "\n", encoding="utf-8")

    logger.info(
        "envelope_report_written",
        extra={
            "path": str(output),
            "total": report.total_validated,
            "invalid": report.invalid,
            "critical": report.critical,
        },
    )
    print(f"Validated {report.total_validated} envelopes: {report.valid} valid, {report.invalid} invalid.")
    for recommendation in report.summary.recommendations:
        print(recommendation)
    print(f"Report saved to: {output}")

    return EXIT_FAILURE if report.summary.critical_issues else EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="portal-crypto", description="Field-level envelope encryption tools.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    commands = parser.add_subparsers(dest="command", required=True)

    key_cmd = commands.add_parser("generate-key", help="Print a fresh base64 encoded 256-bit key.")
    key_cmd.set_defaults(handler=generate_key)

    encrypt_cmd = commands.add_parser("encrypt", help="Encrypt text into an envelope.")
    encrypt_cmd.add_argument("text", nargs="?", default=None, help="Plaintext; read from stdin when omitted.")
    encrypt_cmd.set_defaults(handler=encrypt)

    decrypt_cmd = commands.add_parser("decrypt", help="Decrypt an envelope back into text.")
    decrypt_cmd.add_argument("envelope", nargs="?", default=None, help="Envelope; read from stdin when omitted.")
    decrypt_cmd.set_defaults(handler=decrypt)

    validate_cmd = commands.add_parser("validate", help="Check stored envelopes and write a JSON report.")
    source = validate_cmd.add_mutually_exclusive_group()
    source.add_argument("--input", default=None, help="File with one envelope per line (default: stdin).")
    source.add_argument("--redis", action="store_true", help="Scan records stored in Redis instead of a file.")
    validate_cmd.add_argument("--output", default=DEFAULT_REPORT, help="Target path for the JSON report.")
    validate_cmd.add_argument(
        "--deep",
        action="store_true",
        help="Also authenticate each envelope with the configured key.",
    )
    validate_cmd.set_defaults(handler=validate)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        _configure_logging()
        return args.handler(args)
    except (ConfigurationError, ValidationError) as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG
    except EncryptionError as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as exc:
        print(f"i/o error: {exc}", file=sys.stderr)
        return EXIT_FAILURE


__all__ = ["build_parser", "main"]
