"""Tests for logging setup."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from usercount.config import Settings
from usercount.logging_config import (
    ContextTextFormatter,
    JsonFormatter,
    log_context,
    setup_logging,
)


def _record(msg: str, exc_info=None, **extra) -> logging.LogRecord:
    record = logging.LogRecord("usercount.test", logging.ERROR, __file__, 1, msg, (), exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def _restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    for h in root.handlers[:]:
        root.removeHandler(h)
    for h in saved_handlers:
        root.addHandler(h)
    root.setLevel(saved_level)


def test_log_context_drops_unset_fields():
    assert log_context("QUERY_FAILED") == {"error_code": "QUERY_FAILED"}
    assert log_context(method="GET", path="/api/usercount") == {
        "method": "GET",
        "path": "/api/usercount",
    }


def test_json_formatter_inlines_context_and_exception():
    try:
        raise ValueError("bad")
    except ValueError:
        record = _record(
            "Database error",
            sys.exc_info(),
            **log_context("DATABASE_UNAVAILABLE", "GET", "/api/usercount"),
        )
    entry = json.loads(JsonFormatter().format(record))
    assert entry["level"] == "ERROR"
    assert entry["msg"] == "Database error"
    assert entry["error_code"] == "DATABASE_UNAVAILABLE"
    assert entry["path"] == "/api/usercount"
    assert "ValueError: bad" in entry["exception"]


def test_text_formatter_appends_context():
    line = ContextTextFormatter().format(
        _record("Unhandled error", **log_context(method="GET", path="/boom"))
    )
    assert line.endswith("Unhandled error method=GET path=/boom")


def test_text_formatter_without_context():
    line = ContextTextFormatter().format(_record("plain"))
    assert line.endswith("usercount.test: plain")


def test_setup_logging_applies_settings(_restore_root_logger):
    root = _restore_root_logger
    setup_logging(
        Settings(log_level="WARNING", log_format="json", quiet_loggers=["usercount.noisy"])
    )
    assert root.level == logging.WARNING
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert logging.getLogger("usercount.noisy").level == logging.WARNING


def test_setup_logging_debug_keeps_quiet_loggers_verbose(_restore_root_logger):
    setup_logging(Settings(log_level="DEBUG", quiet_loggers=["usercount.chatty"]))
    assert logging.getLogger("usercount.chatty").level == logging.DEBUG
    assert isinstance(_restore_root_logger.handlers[0].formatter, ContextTextFormatter)
