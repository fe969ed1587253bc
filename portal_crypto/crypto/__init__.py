"""Cryptographic helpers."""

from .encryption import EnvelopeCipher
from .envelope import Envelope, pack, unpack
from .errors import (
    AuthenticationError,
    ConfigurationError,
    EncryptionError,
    FormatError,
    InvalidTagLengthError,
)
from .records import ENCRYPTED_FIELD_NAME, is_sealed, open_record, reseal_records, seal_record

__all__ = [
    "EnvelopeCipher",
    "Envelope",
    "pack",
    "unpack",
    "EncryptionError",
    "ConfigurationError",
    "FormatError",
    "InvalidTagLengthError",
    "AuthenticationError",
    "ENCRYPTED_FIELD_NAME",
    "is_sealed",
    "seal_record",
    "open_record",
    "reseal_records",
]
