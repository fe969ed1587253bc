"""AES-GCM envelope encryption for sensitive stored fields."""

from __future__ import annotations

import base64
import binascii
import os
from dataclasses import dataclass, field
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from . import envelope
from .errors import AuthenticationError, ConfigurationError, FormatError, InvalidTagLengthError


@dataclass(frozen=True)
class EnvelopeCipher:
    """Encrypt values into ``nonce:tag:ciphertext`` envelopes using AES-256-GCM.

    The key is read-only after construction, so one instance may be shared
    between threads. Every call builds its own nonce and cipher context.
    """

    key: bytes = field(repr=False)

    KEY_SIZE = 32
    NONCE_SIZE = 12
    TAG_SIZE = 16

    def __post_init__(self) -> None:
        if not self.key:
            raise ConfigurationError("Encryption key is required.")
        if not isinstance(self.key, (bytes, bytearray)):
            raise ConfigurationError(f"Encryption key must be bytes, got {type(self.key).__name__}.")
        object.__setattr__(self, "key", bytes(self.key))
        if len(self.key) != self.KEY_SIZE:
            raise ConfigurationError(
                f"Encryption key must decode to {self.KEY_SIZE} bytes (256-bit), got {len(self.key)}."
            )

    @classmethod
    def from_settings(cls, settings: Any = None) -> "EnvelopeCipher":
        """Build a cipher from a settings object carrying a base64 ``encryption_key``."""
        if settings is None:
            from portal_crypto.config import get_settings

            settings = get_settings()

        raw = getattr(settings, "encryption_key", None)
        if not raw:
            raise ConfigurationError("Encryption key is required.")
        if not isinstance(raw, (str, bytes, bytearray)):
            raise ConfigurationError(f"Encryption key must be base64 text, got {type(raw).__name__}.")
        try:
            encoded = raw.encode("ascii") if isinstance(raw, str) else bytes(raw)
            decoded = base64.b64decode(encoded, validate=True)
        except (binascii.Error, UnicodeEncodeError) as exc:
            raise ConfigurationError("Encryption key is not valid base64.") from exc
        return cls(decoded)

    @staticmethod
    def generate_key() -> str:
        return base64.b64encode(os.urandom(EnvelopeCipher.KEY_SIZE)).decode("ascii")

    def encrypt(self, plaintext: str | bytes, associated_data: bytes | None = None) -> str:
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")
        aesgcm = AESGCM(self.key)
        nonce = os.urandom(self.NONCE_SIZE)
        sealed = aesgcm.encrypt(nonce, plaintext, associated_data)
        ciphertext, tag = sealed[: -self.TAG_SIZE], sealed[-self.TAG_SIZE :]
        return envelope.pack(ciphertext, nonce, tag)

    def decrypt_bytes(self, value: str, associated_data: bytes | None = None) -> bytes:
        nonce_part, tag_part, ciphertext_part = envelope.split(value)

        # Tag length first, before the other segments are decoded or the cipher runs.
        tag = envelope.decode_segment(tag_part, "tag")
        if len(tag) != self.TAG_SIZE:
            raise InvalidTagLengthError(expected=self.TAG_SIZE, actual=len(tag))

        nonce = envelope.decode_segment(nonce_part, "nonce")
        ciphertext = envelope.decode_segment(ciphertext_part, "ciphertext")

        aesgcm = AESGCM(self.key)
        try:
            return aesgcm.decrypt(nonce, ciphertext + tag, associated_data)
        except InvalidTag as exc:
            raise AuthenticationError("Envelope failed authentication.") from exc
        except ValueError as exc:
            # AESGCM refuses nonces outside 8..128 bytes; no envelope of ours has one.
            raise AuthenticationError("Envelope failed authentication.") from exc

    def decrypt(self, value: str, associated_data: bytes | None = None) -> str:
        plaintext = self.decrypt_bytes(value, associated_data)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FormatError("Decrypted payload is not valid UTF-8 text.") from exc
