"""
Log formatters for softscope.

Provides JSON and text formatters for different deployment environments.
"""

from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any

from softscope.logging.context import CONTEXT_FIELDS

# Attributes every LogRecord carries; never reported as extras.
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """
    JSON-structured log formatter for production use.

    Outputs one JSON object per line with timestamp, level, logger and
    message, the call context fields when present, ``duration_ms``,
    exception details, and any remaining extras under ``extra``.
    """

    def __init__(self, include_extra: bool = True) -> None:
        """
        Initialize the JSON formatter.

        Args:
            include_extra: Whether to include extra fields from the log record
        """
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_dict: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_dict[name] = value

        duration = getattr(record, "duration_ms", None)
        if duration is not None:
            log_dict["duration_ms"] = duration

        if record.exc_info:
            log_dict["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        if self.include_extra:
            reported = set(log_dict) | set(CONTEXT_FIELDS)
            extra = {
                key: value
                for key, value in record.__dict__.items()
                if key not in _RECORD_ATTRIBUTES
                and key not in reported
                and not key.startswith("_")
            }
            if extra:
                log_dict["extra"] = extra

        return json.dumps(log_dict, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """
    Human-readable text formatter for development use.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as readable text."""
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).strftime(
            "%Y-%m-%d %H:%M:%S"
        )

        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level = f"{self.COLORS[level]}{level:8}{self.RESET}"
        else:
            level = f"{level:8}"

        context_parts = []
        for name in ("model", "operation", "request_id"):
            value = getattr(record, name, None)
            if value is not None:
                context_parts.append(f"{name}={value}")
        context = f" [{', '.join(context_parts)}]" if context_parts else ""

        duration = getattr(record, "duration_ms", None)
        duration_str = f" ({duration:.1f}ms)" if duration is not None else ""

        log_line = f"{timestamp} {level} {record.name}{context}: {record.getMessage()}{duration_str}"

        if record.exc_info:
            log_line += "\n" + self.formatException(record.exc_info)

        return log_line
