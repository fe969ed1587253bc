"""Schemas for the envelope integrity report."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EnvelopeCheck(_ReportModel):
    source: str
    valid: bool
    error: str | None = Field(default=None)
    critical: bool = Field(default=False)
    nonce_length: int | None = Field(default=None)
    tag_length: int | None = Field(default=None)


class ReportSummary(_ReportModel):
    all_valid: bool
    critical_issues: bool
    recommendations: list[str] = Field(default_factory=list)


class ValidationReport(_ReportModel):
    timestamp: datetime
    total_validated: int
    valid: int
    invalid: int
    critical: int
    results: list[EnvelopeCheck]
    summary: ReportSummary
