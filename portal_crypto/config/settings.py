"""Application settings using Pydantic settings management."""

from __future__ import annotations

import base64
import binascii
from functools import lru_cache
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment configuration for the field encryption toolkit."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="PORTAL_CRYPTO_")

    app_name: str = Field(default="portal-field-crypto")
    environment: str = Field(default="dev")

    encryption_key: Optional[str] = Field(
        default=None,
        description="Base64 encoded 256-bit key for AES-GCM field encryption.",
    )

    redis_url: str = Field(default="redis://localhost:6379/0")
    scan_pattern: str = Field(
        default="v1:records:*",
        description="Key pattern matched by the envelope integrity scan.",
    )
    scan_fields: list[str] = Field(
        default_factory=lambda: ["data"],
        description="Hash fields holding envelopes or sealed record payloads.",
    )
    scan_batch_size: int = Field(default=1000, gt=0)

    log_level: str = Field(default="INFO")

    def decode_encryption_key(self) -> bytes | None:
        if not self.encryption_key:
            return None
        return base64.b64decode(self.encryption_key.encode("ascii"), validate=True)

    @model_validator(mode="after")
    def validate_crypto_material(self) -> "Settings":
        try:
            key = self.decode_encryption_key()
        except (binascii.Error, UnicodeEncodeError) as exc:
            raise ValueError("PORTAL_CRYPTO_ENCRYPTION_KEY must be valid base64.") from exc

        if key is not None and len(key) != 32:
            raise ValueError("PORTAL_CRYPTO_ENCRYPTION_KEY must decode to 32 bytes (256-bit).")

        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
