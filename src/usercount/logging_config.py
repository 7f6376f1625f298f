"""Logging setup for usercount.

Error logs from the endpoint layer carry ``error_code``, ``method`` and
``path`` through ``extra=``; both formatters render them when present.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone

from usercount.config import Settings

CONTEXT_FIELDS = ("error_code", "method", "path")


def log_context(error_code: str | None = None, method: str | None = None, path: str | None = None) -> dict:
    """``extra=`` mapping holding only the context fields that are set."""
    values = {"error_code": error_code, "method": method, "path": path}
    return {key: value for key, value in values.items() if value is not None}


def _context(record: logging.LogRecord) -> dict:
    return {
        field: getattr(record, field)
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per line, context fields inlined."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **_context(record),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ContextTextFormatter(logging.Formatter):
    """Plain text lines with context fields appended as ``key=value``."""

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = _context(record)
        if context:
            line += " " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


def build_logging_config(config: Settings) -> dict:
    """``logging.config.dictConfig`` schema for ``config``."""
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    formatter = "json" if config.log_format == "json" else "text"
    # Third-party chatter only at DEBUG.
    quiet_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "text": {"()": ContextTextFormatter},
            "json": {"()": JsonFormatter},
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": formatter,
                "level": level,
            },
        },
        "loggers": {name: {"level": quiet_level} for name in config.quiet_loggers},
        "root": {"level": level, "handlers": ["stderr"]},
    }


def setup_logging(config: Settings | None = None) -> None:
    """Apply UC_LOG_LEVEL / UC_LOG_FORMAT / UC_QUIET_LOGGERS to the root logger."""
    if config is None:
        from usercount.config import settings as config

    logging.config.dictConfig(build_logging_config(config))
