"""Integrity checks for envelopes already stored by other services."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable

from portal_crypto.crypto import EncryptionError, EnvelopeCipher, FormatError
from portal_crypto.crypto import envelope as envelope_format
from portal_crypto.schemas import EnvelopeCheck, ReportSummary, ValidationReport

logger = logging.getLogger("portal_crypto.audit")


class EnvelopeValidator:
    """Check stored envelopes for structural damage.

    Without a cipher only the shape is checked (three segments, 12-byte nonce,
    16-byte tag, decodable ciphertext). With a cipher every structurally valid
    envelope is also authenticated.
    """

    def __init__(self, cipher: EnvelopeCipher | None = None) -> None:
        self._cipher = cipher

    def validate(self, value: str, source: str) -> EnvelopeCheck:
        check = self._check(value, source)
        if not check.valid:
            logger.warning(
                "envelope_invalid",
                extra={"source": source, "critical": check.critical, "error": check.error},
            )
        return check

    def validate_many(self, items: Iterable[tuple[str, str]]) -> list[EnvelopeCheck]:
        return [self.validate(value, source) for source, value in items]

    def _check(self, value: str, source: str) -> EnvelopeCheck:
        try:
            nonce_part, tag_part, ciphertext_part = envelope_format.split(value)
        except FormatError as exc:
            return EnvelopeCheck(source=source, valid=False, error=str(exc))

        try:
            nonce = envelope_format.decode_segment(nonce_part, "nonce")
        except FormatError as exc:
            return EnvelopeCheck(source=source, valid=False, error=str(exc))
        if len(nonce) != EnvelopeCipher.NONCE_SIZE:
            return EnvelopeCheck(
                source=source,
                valid=False,
                error=f"Invalid nonce length: {len(nonce)} bytes (expected {EnvelopeCipher.NONCE_SIZE})",
                nonce_length=len(nonce),
            )

        try:
            tag = envelope_format.decode_segment(tag_part, "tag")
        except FormatError as exc:
            return EnvelopeCheck(source=source, valid=False, error=str(exc), critical=True, nonce_length=len(nonce))
        if len(tag) != EnvelopeCipher.TAG_SIZE:
            return EnvelopeCheck(
                source=source,
                valid=False,
                error=f"Invalid authentication tag length: {len(tag)} bytes (expected {EnvelopeCipher.TAG_SIZE})",
                critical=True,
                nonce_length=len(nonce),
                tag_length=len(tag),
            )

        try:
            envelope_format.decode_segment(ciphertext_part, "ciphertext")
        except FormatError as exc:
            return EnvelopeCheck(
                source=source, valid=False, error=str(exc), nonce_length=len(nonce), tag_length=len(tag)
            )

        if self._cipher is not None:
            try:
                self._cipher.decrypt_bytes(value)
            except EncryptionError as exc:
                return EnvelopeCheck(
                    source=source,
                    valid=False,
                    error=f"{type(exc).__name__}: {exc}",
                    critical=True,
                    nonce_length=len(nonce),
                    tag_length=len(tag),
                )

        return EnvelopeCheck(source=source, valid=True, nonce_length=len(nonce), tag_length=len(tag))


def build_report(checks: Iterable[EnvelopeCheck], timestamp: datetime | None = None) -> ValidationReport:
    results = list(checks)
    valid = sum(1 for check in results if check.valid)
    invalid = len(results) - valid
    critical = sum(1 for check in results if check.critical)
    all_valid = invalid == 0

    recommendations: list[str] = []
    if critical:
        recommendations.append(
            "CRITICAL: Found encrypted data with invalid authentication tags. "
            "These must be re-encrypted before deploying the security fix."
        )
    if invalid:
        recommendations.append(f"Found {invalid} invalid encrypted records. Review and re-encrypt as needed.")
    if all_valid:
        recommendations.append("All encrypted data has valid authentication tag formats. Safe to deploy update.")

    return ValidationReport(
        timestamp=timestamp or datetime.now(timezone.utc),
        total_validated=len(results),
        valid=valid,
        invalid=invalid,
        critical=critical,
        results=results,
        summary=ReportSummary(
            all_valid=all_valid,
            critical_issues=critical > 0,
            recommendations=recommendations,
        ),
    )
