"""
Call context for softscope operations.

A QueryCall is what the interception point hands to hooks and, finally,
to the executor: which model, which operation, and the arguments.
"""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4

from softscope.core.args import QueryArgs, WriteArgs


class Operation(str, Enum):
    """Operations a model delegate can dispatch."""

    FIND_MANY = "find_many"
    FIND_FIRST = "find_first"
    FIND_UNIQUE = "find_unique"
    COUNT = "count"
    CREATE = "create"
    UPDATE = "update"
    UPSERT = "upsert"
    DELETE = "delete"
    UPDATE_MANY = "update_many"
    DELETE_MANY = "delete_many"


# Operations returning a filtered, possibly nested collection of rows.
LIST_READ_OPERATIONS: frozenset[Operation] = frozenset({Operation.FIND_MANY})

# Operations whose arguments are a QueryArgs tree.
QUERY_OPERATIONS: frozenset[Operation] = frozenset(
    {
        Operation.FIND_MANY,
        Operation.FIND_FIRST,
        Operation.FIND_UNIQUE,
        Operation.COUNT,
    }
)


@dataclass(frozen=True)
class QueryCall:
    """
    A single dispatched operation.

    Hooks never mutate a call; they derive a new one with ``with_args``.
    """

    model: str
    operation: Operation
    args: QueryArgs | WriteArgs
    request_id: str = field(default_factory=lambda: str(uuid4()))
    trace_id: str | None = None

    @property
    def is_query(self) -> bool:
        """Whether the call carries a QueryArgs tree."""
        return self.operation in QUERY_OPERATIONS

    def with_args(self, args: QueryArgs | WriteArgs) -> "QueryCall":
        """Return a copy of this call with different arguments."""
        return dataclasses.replace(self, args=args)
