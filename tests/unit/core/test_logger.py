"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from expense_api.core.logger import JSONFormatter, configure_logging


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG")

    # Assert
    assert logging.getLogger().level == logging.DEBUG
    configure_logging("INFO")


def test_json_formatter_renders_extra_keys() -> None:
    record = logging.LogRecord(
        name="expense_api.services.auth.service",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="auth.refresh.reuse_detected",
        args=(),
        exc_info=None,
    )
    record.event = "auth.refresh.reuse_detected"
    record.user_id = 7
    record.request_id = "abc"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["message"] == "auth.refresh.reuse_detected"
    assert payload["event"] == "auth.refresh.reuse_detected"
    assert payload["user_id"] == 7
    assert payload["request_id"] == "abc"
    assert "reason" not in payload


def test_json_formatter_renders_rejection_reason() -> None:
    record = logging.LogRecord(
        name="expense_api.services.auth.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="auth.refresh.rejected",
        args=(),
        exc_info=None,
    )
    record.event = "auth.refresh.rejected"
    record.reason = "TokenExpiredError"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["event"] == "auth.refresh.rejected"
    assert payload["reason"] == "TokenExpiredError"
    assert "user_id" not in payload
