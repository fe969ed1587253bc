"""Scan Redis-stored records for damaged envelopes."""

from __future__ import annotations

import json
import logging
from typing import Sequence

from redis.asyncio import Redis

from portal_crypto.config import get_settings
from portal_crypto.crypto import ENCRYPTED_FIELD_NAME, is_sealed
from portal_crypto.schemas import EnvelopeCheck
from portal_crypto.storage import RedisFactory

from .validation import EnvelopeValidator

logger = logging.getLogger("portal_crypto.audit")


def _text(value: bytes | str) -> str:
    return value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value


def extract_envelope(raw: str) -> str | None:
    """Return the envelope held by a stored field value, if any.

    A field holds either a bare envelope or a JSON record payload; plain
    (unsealed) JSON payloads carry no envelope.
    """
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return raw
    if is_sealed(payload):
        value = payload[ENCRYPTED_FIELD_NAME]
        return "" if value is None else str(value)
    if isinstance(payload, str):
        return payload
    return None


class RedisEnvelopeScanner:
    def __init__(
        self,
        validator: EnvelopeValidator | None = None,
        redis: Redis | None = None,
        *,
        pattern: str | None = None,
        fields: Sequence[str] | None = None,
        batch_size: int | None = None,
    ) -> None:
        settings = get_settings()
        self._validator = validator or EnvelopeValidator()
        self._redis = redis or RedisFactory.client()
        self._pattern = pattern or settings.scan_pattern
        self._fields = tuple(fields or settings.scan_fields)
        self._batch_size = batch_size or settings.scan_batch_size

    async def scan(self) -> list[EnvelopeCheck]:
        checks: list[EnvelopeCheck] = []
        scanned = 0
        async for key in self._redis.scan_iter(match=self._pattern, count=self._batch_size):
            scanned += 1
            record_key = _text(key)
            raw = await self._redis.hgetall(key)
            for field_name, value in raw.items():
                name = _text(field_name)
                if name not in self._fields:
                    continue
                candidate = extract_envelope(_text(value))
                if candidate is None:
                    continue
                checks.append(self._validator.validate(candidate, f"{record_key}#{name}"))

        logger.info(
            "envelope_scan_finished",
            extra={"pattern": self._pattern, "keys_scanned": scanned, "envelopes_checked": len(checks)},
        )
        return checks
