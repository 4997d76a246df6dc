"""
Logging configuration for softscope.

Provides easy setup of structured logging for different environments.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import TextIO

from softscope.logging.context import ContextFilter
from softscope.logging.formatters import JSONFormatter, TextFormatter

ROOT_LOGGER = "softscope"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log format options."""

    JSON = "json"
    TEXT = "text"


def get_logger(name: str) -> logging.Logger:
    """
    Get a softscope logger by name.

    Names outside the ``softscope`` namespace are nested under it so that
    ``configure_logging`` applies to them.
    """
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    format: LogFormat | str = LogFormat.JSON,
    output: TextIO | None = None,
    include_context: bool = True,
    use_colors: bool = True,
) -> None:
    """
    Configure softscope logging.

    Should be called once at application startup.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format (json for production, text for development)
        output: Output stream (defaults to stderr)
        include_context: Whether to include call context fields in logs
        use_colors: Whether to use colors in text format (ignored for JSON)

    Example:
        configure_logging(level="DEBUG", format="text")
    """
    if isinstance(level, str):
        level = LogLevel(level.upper())
    if isinstance(format, str):
        format = LogFormat(format.lower())

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, level.value))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(output or sys.stderr)
    handler.setLevel(getattr(logging, level.value))

    if format == LogFormat.JSON:
        handler.setFormatter(JSONFormatter(include_extra=True))
    else:
        handler.setFormatter(TextFormatter(use_colors=use_colors))

    if include_context:
        handler.addFilter(ContextFilter())

    root_logger.addHandler(handler)
    root_logger.propagate = False
