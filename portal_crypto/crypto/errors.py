"""Error kinds raised by the envelope codec."""

from __future__ import annotations


class EncryptionError(Exception):
    """Base class for every envelope codec failure."""


class ConfigurationError(EncryptionError):
    """Raised when the codec has no usable key."""


class FormatError(EncryptionError):
    """Raised when a value is not a well-formed ``nonce:tag:ciphertext`` envelope."""


class InvalidTagLengthError(EncryptionError):
    """Raised when the decoded authentication tag has the wrong size."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Invalid authentication tag length. Expected {expected} bytes.")
        self.expected = expected
        self.actual = actual


class AuthenticationError(EncryptionError):
    """Raised when the AEAD integrity check fails."""
