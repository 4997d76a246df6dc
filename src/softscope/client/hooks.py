"""
Pre-dispatch hooks for DataClient.

A hook wraps the dispatch of every call whose operation is in its
``operations`` set. It receives the call and a ``proceed`` handler, and
may hand a rewritten call to ``proceed``.
"""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from softscope.core.context import Operation, QueryCall
from softscope.logging.context import LogContext, with_log_context

logger = logging.getLogger(__name__)

Handler = Callable[[QueryCall], Any]

ALL_OPERATIONS: frozenset[Operation] = frozenset(Operation)


class QueryHook(ABC):
    """
    Base class for dispatch hooks.

    Attributes:
        name: Unique name for this hook
        operations: Operations this hook intercepts
        scoping: Whether the hook restricts which rows are visible; scoping
            hooks are dropped by ``DataClient.with_deleted()``
    """

    name: str = "hook"
    operations: frozenset[Operation] = ALL_OPERATIONS
    scoping: bool = False

    def applies_to(self, call: QueryCall) -> bool:
        """Check whether this hook intercepts ``call``."""
        return call.operation in self.operations

    @abstractmethod
    def __call__(self, call: QueryCall, proceed: Handler) -> Any:
        """Handle ``call``, usually by returning ``proceed(call)``."""
        ...


class LoggingHook(QueryHook):
    """
    Logs every dispatched call with its duration.

    The call's model, operation and request id are set as log context for
    the duration of the dispatch.
    """

    name = "logging"

    def __init__(self, level: int = logging.DEBUG) -> None:
        self.level = level

    def __call__(self, call: QueryCall, proceed: Handler) -> Any:
        with with_log_context(LogContext.from_call(call)):
            start_time = time.perf_counter()
            try:
                result = proceed(call)
            except Exception:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.warning(
                    "%s.%s failed",
                    call.model,
                    call.operation.value,
                    extra={"duration_ms": duration_ms},
                    exc_info=True,
                )
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.log(
                self.level,
                "%s.%s completed",
                call.model,
                call.operation.value,
                extra={"duration_ms": duration_ms},
            )
            return result
