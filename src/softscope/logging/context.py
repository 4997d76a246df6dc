"""
Logging context management for softscope.

Provides context injection for structured logging, so the model, operation
and request of the call being dispatched are included in log messages.
"""

from __future__ import annotations

import contextvars
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from softscope.core.context import QueryCall

_log_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "softscope_log_context",
    default=None,
)

# Record attributes stamped by ContextFilter and read by the formatters.
CONTEXT_FIELDS = ("request_id", "trace_id", "model", "operation")


@dataclass
class LogContext:
    """
    Structured logging context.

    Contains fields that should be included in all log messages within
    the dispatch of a single call.
    """

    request_id: str | None = None
    trace_id: str | None = None
    model: str | None = None
    operation: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_call(cls, call: QueryCall) -> LogContext:
        """Create a LogContext from a dispatched call."""
        return cls(
            request_id=call.request_id,
            trace_id=call.trace_id,
            model=call.model,
            operation=call.operation.value,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary of non-None values."""
        result = {
            name: getattr(self, name)
            for name in CONTEXT_FIELDS
            if getattr(self, name) is not None
        }
        result.update(self.extra)
        return result


def get_log_context() -> dict[str, Any]:
    """Get the current log context."""
    ctx = _log_context.get()
    return ctx.copy() if ctx else {}


def clear_log_context() -> None:
    """Clear the current log context."""
    _log_context.set(None)


@contextmanager
def with_log_context(
    context: LogContext | dict[str, Any] | None = None,
    **kwargs: Any,
) -> Iterator[None]:
    """
    Context manager for setting log context within a scope.

    Example:
        with with_log_context(model="User", operation="find_many"):
            logger.info("Dispatching")  # Includes model and operation

    Args:
        context: Optional LogContext or dict of context fields
        **kwargs: Additional context fields
    """
    previous = _log_context.get()

    if context is not None:
        new_context = (
            context.to_dict() if isinstance(context, LogContext) else dict(context)
        )
    else:
        new_context = previous.copy() if previous else {}

    new_context.update(kwargs)
    token = _log_context.set(new_context)

    try:
        yield
    finally:
        _log_context.reset(token)


class ContextFilter(logging.Filter):
    """
    Logging filter that injects context fields into log records.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context fields to the log record."""
        for key, value in get_log_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
