"""
softscope structured logging.

Provides JSON and text formatting with call context injection.
"""

from softscope.logging.config import (
    LogFormat,
    LogLevel,
    configure_logging,
    get_logger,
)
from softscope.logging.context import (
    ContextFilter,
    LogContext,
    clear_log_context,
    get_log_context,
    with_log_context,
)
from softscope.logging.formatters import JSONFormatter, TextFormatter

__all__ = [
    # Configuration
    "configure_logging",
    "get_logger",
    "LogLevel",
    "LogFormat",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    # Context
    "ContextFilter",
    "LogContext",
    "clear_log_context",
    "get_log_context",
    "with_log_context",
]
