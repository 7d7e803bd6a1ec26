"""
Tests — Response Classifier
============================
Unit tests for :func:`~address_to_utm.classifier.classify`.
"""

from __future__ import annotations

import logging

import pytest

from address_to_utm.classifier import Decision, classify


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        ("OK", Decision.PROCEED),
        ("ZERO_RESULTS", Decision.CONTINUE),
        ("OVER_QUERY_LIMIT", Decision.STOP),
        ("REQUEST_DENIED", Decision.CONTINUE),
        ("INVALID_REQUEST", Decision.CONTINUE),
        ("UNKNOWN_ERROR", Decision.CONTINUE),
        ("SOMETHING_NEW", Decision.CONTINUE),
        ("", Decision.CONTINUE),
    ],
)
def test_status_policy(status: str, expected: Decision) -> None:
    assert classify(status) is expected


class TestLogging:
    def test_ok_is_silent(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="address_to_utm.classifier"):
            classify("OK", request="req-1")
        assert caplog.records == []

    def test_denied_logs_error_message(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="address_to_utm.classifier"):
            classify("REQUEST_DENIED", "The provided API key is invalid.", request="req-2")
        assert "req-2" in caplog.text
        assert "The provided API key is invalid." in caplog.text

    def test_missing_error_message_reported_as_na(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="address_to_utm.classifier"):
            classify("UNKNOWN_ERROR", request="req-3")
        assert "N/A" in caplog.text

    def test_quota_logged_as_error(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="address_to_utm.classifier"):
            classify("OVER_QUERY_LIMIT", request="req-4")
        assert caplog.records[0].levelno == logging.ERROR

    def test_unrecognised_status_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="address_to_utm.classifier"):
            classify("SOMETHING_NEW", request="req-5")
        assert "SOMETHING_NEW" in caplog.text
