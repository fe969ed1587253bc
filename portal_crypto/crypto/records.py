"""Seal and open JSON record payloads under a single envelope field."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from .encryption import EnvelopeCipher
from .errors import FormatError

ENCRYPTED_FIELD_NAME = "$encrypted"


def is_sealed(data: Any) -> bool:
    return isinstance(data, Mapping) and ENCRYPTED_FIELD_NAME in data


def seal_record(cipher: EnvelopeCipher, data: Mapping[str, Any]) -> dict[str, Any]:
    """Replace a record payload with ``{"$encrypted": <envelope>}``.

    Already sealed payloads are returned unchanged.
    """
    if is_sealed(data):
        return dict(data)
    serialized = json.dumps(dict(data), ensure_ascii=False, separators=(",", ":"))
    return {ENCRYPTED_FIELD_NAME: cipher.encrypt(serialized)}


def open_record(cipher: EnvelopeCipher, data: Mapping[str, Any]) -> dict[str, Any]:
    """Return the plain payload of a sealed record; plain records pass through.

    Codec errors propagate so a tampered record is never served as data.
    """
    if not is_sealed(data):
        return dict(data)
    plaintext = cipher.decrypt(data[ENCRYPTED_FIELD_NAME])
    try:
        payload = json.loads(plaintext)
    except json.JSONDecodeError as exc:
        raise FormatError("Sealed record does not contain a JSON document.") from exc
    if not isinstance(payload, dict):
        raise FormatError("Sealed record must contain a JSON object.")
    return payload


def reseal_records(
    cipher: EnvelopeCipher,
    records: Iterable[Mapping[str, Any]],
    *,
    encrypted: bool,
    limit: int = 1000,
) -> tuple[list[dict[str, Any]], int]:
    """Bring up to ``limit`` records into the requested sealed state.

    Returns every record (converted or not) and the number converted.
    """
    if limit <= 0:
        raise ValueError("limit must be positive")

    converted = 0
    result: list[dict[str, Any]] = []
    for data in records:
        if converted < limit and is_sealed(data) != encrypted:
            data = seal_record(cipher, data) if encrypted else open_record(cipher, data)
            converted += 1
        result.append(dict(data))
    return result, converted
