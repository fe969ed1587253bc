"""Structural and deep integrity checks of stored envelopes."""

from __future__ import annotations

import base64
import json
import os
from datetime import datetime, timezone

from portal_crypto.crypto import EnvelopeCipher
from portal_crypto.services import EnvelopeValidator, build_report

SHORT_TAG = "c2hvcnRfdGFn"


def _b64(value: bytes) -> str:
    return base64.b64encode(value).decode()


def test_real_envelope_is_valid(cipher):
    check = EnvelopeValidator().validate(cipher.encrypt("payload"), "records:1#data")
    assert check.valid
    assert check.error is None
    assert (check.nonce_length, check.tag_length) == (12, 16)


def test_short_tag_is_critical():
    check = EnvelopeValidator().validate(
        f"{_b64(os.urandom(12))}:{SHORT_TAG}:ZW5jcnlwdGVkX2RhdGE=", "event_invalid"
    )
    assert not check.valid
    assert check.critical
    assert check.tag_length == 9
    assert "Invalid authentication tag length: 9 bytes (expected 16)" == check.error


def test_wrong_part_count_is_not_critical():
    check = EnvelopeValidator().validate("invalid:data", "row")
    assert not check.valid
    assert not check.critical
    assert "got 2" in check.error


def test_wrong_nonce_length():
    check = EnvelopeValidator().validate(f"{_b64(b'x' * 16)}:{_b64(os.urandom(16))}:AAAA", "row")
    assert not check.valid
    assert check.nonce_length == 16
    assert "nonce length" in check.error


def test_undecodable_tag_is_critical():
    check = EnvelopeValidator().validate(f"{_b64(os.urandom(12))}:@@@@:AAAA", "row")
    assert not check.valid
    assert check.critical


def test_undecodable_ciphertext():
    check = EnvelopeValidator().validate(f"{_b64(os.urandom(12))}:{_b64(os.urandom(16))}:@@", "row")
    assert not check.valid
    assert not check.critical
    assert check.tag_length == 16


def test_deep_check_authenticates(cipher):
    validator = EnvelopeValidator(cipher)
    assert validator.validate(cipher.encrypt("payload"), "ok").valid

    foreign = EnvelopeCipher(os.urandom(32)).encrypt("payload")
    check = validator.validate(foreign, "foreign")
    assert not check.valid
    assert check.critical
    assert check.error.startswith("AuthenticationError")


def test_invalid_envelopes_are_logged(caplog):
    with caplog.at_level("WARNING", logger="portal_crypto.audit"):
        EnvelopeValidator().validate("invalid:data", "events:7#body")
    assert any(getattr(record, "source", None) == "events:7#body" for record in caplog.records)


def test_report_counts_and_recommendations(cipher):
    validator = EnvelopeValidator()
    checks = validator.validate_many(
        [
            ("a", cipher.encrypt("one")),
            ("b", f"{_b64(os.urandom(12))}:{SHORT_TAG}:AAAA"),
            ("c", "invalid:data"),
        ]
    )
    report = build_report(checks)

    assert report.total_validated == 3
    assert (report.valid, report.invalid, report.critical) == (1, 2, 1)
    assert not report.summary.all_valid
    assert report.summary.critical_issues
    assert report.summary.recommendations[0].startswith("CRITICAL")
    assert "Found 2 invalid encrypted records" in report.summary.recommendations[1]


def test_report_all_valid(cipher):
    checks = EnvelopeValidator().validate_many([("a", cipher.encrypt("one"))])
    report = build_report(checks)
    assert report.summary.all_valid
    assert not report.summary.critical_issues
    assert report.summary.recommendations == [
        "All encrypted data has valid authentication tag formats. Safe to deploy update."
    ]


def test_report_serializes_with_camel_case_keys(cipher):
    moment = datetime(2026, 1, 1, tzinfo=timezone.utc)
    report = build_report(EnvelopeValidator().validate_many([("a", cipher.encrypt("x"))]), timestamp=moment)
    payload = json.loads(report.model_dump_json(by_alias=True))
    assert payload["totalValidated"] == 1
    assert payload["summary"]["allValid"] is True
    assert payload["results"][0]["tagLength"] == 16
    assert payload["timestamp"].startswith("2026-01-01")
