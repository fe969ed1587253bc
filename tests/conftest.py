"""Shared fixtures: isolated settings and a deterministic test key."""

from __future__ import annotations

import base64
from typing import Iterator

import pytest

from portal_crypto.config import get_settings
from portal_crypto.crypto import EnvelopeCipher

RAW_KEY = b"k" * 32
ENCODED_KEY = base64.b64encode(RAW_KEY).decode()


@pytest.fixture(autouse=True)
def _isolate_settings(tmp_path, monkeypatch) -> Iterator[None]:
    """Run every test away from any local .env file and with a fresh settings cache."""
    monkeypatch.chdir(tmp_path)
    for name in ("ENCRYPTION_KEY", "REDIS_URL", "SCAN_PATTERN", "SCAN_FIELDS", "SCAN_BATCH_SIZE", "LOG_LEVEL"):
        monkeypatch.delenv(f"PORTAL_CRYPTO_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def configured_key(monkeypatch) -> str:
    monkeypatch.setenv("PORTAL_CRYPTO_ENCRYPTION_KEY", ENCODED_KEY)
    get_settings.cache_clear()
    return ENCODED_KEY


@pytest.fixture
def cipher() -> EnvelopeCipher:
    return EnvelopeCipher(RAW_KEY)
