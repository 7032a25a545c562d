"""
Structured logging setup.

Production emits one JSON object per record; development gets a coloured,
human-readable line. Fields passed through ``extra=`` (contract name, input
mode, declaration counts, request timings) become top-level JSON keys in
production and trailing ``key=value`` pairs in development.

Modules obtain loggers through get_logger(name), which configures the root
logger on first use.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra=`` fields attached to *record*, in insertion order."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON object (for production)."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in extra_fields(record).items():
            log_obj.setdefault(key, value)
        if record.exc_info and record.exc_info[0] is not None:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, default=str)


class DevFormatter(logging.Formatter):
    """Human-readable coloured formatter for local development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        ts = datetime.now(timezone.utc).strftime("%H:%M:%S")
        base = f"{color}{ts} [{record.levelname:<8}]{self.RESET} {record.name}: {record.getMessage()}"
        fields = extra_fields(record)
        if fields:
            base += "  " + " ".join(f"{key}={value}" for key, value in fields.items())
        if record.exc_info and record.exc_info[0] is not None:
            base += "\n" + self.formatException(record.exc_info)
        return base


_configured = False


def _configure_root(is_dev: bool = True, level: str = "") -> None:
    """Configure the root logger once. An explicit *level* wins over the environment default."""
    global _configured
    if _configured:
        return
    _configured = True

    root = logging.getLogger()
    default_level = logging.DEBUG if is_dev else logging.INFO
    root.setLevel(level.upper() if level else default_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(DevFormatter() if is_dev else JSONFormatter())
    root.handlers = [handler]

    for name in ("httpx", "httpcore", "uvicorn.access", "watchfiles", "multipart"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a named logger. Lazily configures root logger on first call."""
    # Deferred: config.py is importable without logging configured
    from contractviz.config import get_settings

    settings = get_settings()
    _configure_root(settings.is_development, settings.LOG_LEVEL)
    return logging.getLogger(name)
