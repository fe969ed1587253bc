"""Pydantic schema exports."""

from .validation import EnvelopeCheck, ReportSummary, ValidationReport

__all__ = [
    "EnvelopeCheck",
    "ReportSummary",
    "ValidationReport",
]
