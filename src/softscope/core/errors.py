"""
Error taxonomy for softscope.

All softscope errors inherit from SoftScopeError and include:
- A unique error code for programmatic handling
- A human-readable message
- Optional retry hints describing how to fix the call

The scoping engine itself never raises; these errors come from the client
boundary and from the executor.
"""

from typing import Any


class SoftScopeError(Exception):
    """
    Base class for all softscope errors.

    Attributes:
        code: Unique error code for programmatic handling
        message: Human-readable error message
        retry_hints: Suggestions for how to fix the error
        details: Additional error context
    """

    code: str = "SOFTSCOPE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        retry_hints: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.retry_hints = retry_hints or []
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "retry_hints": self.retry_hints,
            "details": self.details,
        }


class UnknownModelError(SoftScopeError):
    """The requested model is not registered with the executor."""

    code = "UNKNOWN_MODEL"

    def __init__(
        self,
        model: str,
        known_models: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        hints = []
        if known_models:
            hints.append(f"Known models: {', '.join(sorted(known_models))}")
        super().__init__(
            f"Model '{model}' is not registered",
            retry_hints=hints,
            details={"model": model, "known_models": known_models},
            **kwargs,
        )


class ValidationError(SoftScopeError):
    """Query or write arguments could not be compiled."""

    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            details={"field": field} if field else {},
            **kwargs,
        )


class NotFoundError(SoftScopeError):
    """A write addressed a record that does not exist."""

    code = "NOT_FOUND"

    def __init__(
        self,
        model: str,
        where: dict[str, Any] | None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"No '{model}' record matches {where!r}",
            details={"model": model, "where": where},
            **kwargs,
        )


class UnsupportedOperationError(SoftScopeError):
    """The executor does not implement the requested operation."""

    code = "UNSUPPORTED_OPERATION"

    def __init__(
        self,
        operation: str,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"Operation '{operation}' is not supported",
            details={"operation": operation},
            **kwargs,
        )
