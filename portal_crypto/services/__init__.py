"""Service layer exported symbols."""

from .validation import EnvelopeValidator, build_report
from .scan import RedisEnvelopeScanner, extract_envelope

__all__ = [
    "EnvelopeValidator",
    "build_report",
    "RedisEnvelopeScanner",
    "extract_envelope",
]
