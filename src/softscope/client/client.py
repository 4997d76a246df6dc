"""
Data-access client.

DataClient is the interception point: every operation issued through a
ModelDelegate becomes a QueryCall that passes through the registered hooks
before reaching the executor.

Example:
    client = DataClient(SQLAlchemyExecutor(models, engine=engine))
    client = extend_with_soft_delete(client)

    client.model("User").find_many(include={"posts": True})   # scoped
    client.with_deleted().model("User").find_many()            # full history
"""

import functools
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from softscope.adapters.base import QueryExecutor
from softscope.client.hooks import Handler, QueryHook
from softscope.core.args import QueryArgs, WriteArgs, coerce_query_args
from softscope.core.context import Operation, QueryCall
from softscope.core.errors import UnknownModelError

logger = logging.getLogger(__name__)


class DataClient:
    """
    Client dispatching model operations through hooks to an executor.

    Clients are immutable: ``use`` returns a new client, and every client
    derived from the same base shares its executor.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        hooks: Iterable[QueryHook] = (),
        *,
        base: "DataClient | None" = None,
    ) -> None:
        self.executor = executor
        self.hooks: tuple[QueryHook, ...] = tuple(hooks)
        self._base = base

    @property
    def base(self) -> "DataClient":
        """The client this one was extended from (itself if not extended)."""
        return self._base or self

    def use(self, hook: QueryHook) -> "DataClient":
        """Return a new client with ``hook`` registered after existing hooks."""
        logger.debug("Registering hook %s", hook.name)
        return DataClient(self.executor, (*self.hooks, hook), base=self.base)

    def with_deleted(self) -> "DataClient":
        """
        Return an unscoped view over the same executor.

        Scoping hooks are removed; other hooks are kept. Reads issued through
        the returned client see soft-deleted rows.
        """
        hooks = [hook for hook in self.hooks if not hook.scoping]
        if not hooks:
            return self.base
        return DataClient(self.executor, hooks, base=self.base)

    def model(self, name: str) -> "ModelDelegate":
        """Get the delegate for a model."""
        known = self.executor.model_names()
        if name not in known:
            raise UnknownModelError(name, known)
        return ModelDelegate(self, name)

    def dispatch(self, call: QueryCall) -> Any:
        """
        Run ``call`` through the applicable hooks and the executor.

        Hooks run in registration order; the first registered is outermost.
        """
        handler: Handler = self.executor.execute
        for hook in reversed(self.hooks):
            if hook.applies_to(call):
                handler = functools.partial(hook, proceed=handler)
        return handler(call)


class ModelDelegate:
    """
    Operations on a single model.

    Read arguments may be given as a mapping, a QueryArgs tree, keyword
    arguments, or a combination (keywords win).
    """

    def __init__(self, client: DataClient, model: str) -> None:
        self.client = client
        self.model = model

    def find_many(
        self,
        args: QueryArgs | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> list[dict[str, Any]]:
        """Read all rows matching ``where``."""
        return self._query(Operation.FIND_MANY, args, kwargs)

    def find_first(
        self,
        args: QueryArgs | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any] | None:
        """Read the first row matching ``where``."""
        return self._query(Operation.FIND_FIRST, args, kwargs)

    def find_unique(
        self,
        args: QueryArgs | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any] | None:
        """Read one row by primary key or unique field."""
        return self._query(Operation.FIND_UNIQUE, args, kwargs)

    def count(
        self,
        args: QueryArgs | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> int:
        """Count rows matching ``where``."""
        return self._query(Operation.COUNT, args, kwargs)

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a row."""
        return self._write(Operation.CREATE, WriteArgs(data=data))

    def update(self, where: dict[str, Any], data: dict[str, Any]) -> dict[str, Any]:
        """Update one row addressed by a unique ``where``."""
        return self._write(Operation.UPDATE, WriteArgs(where=where, data=data))

    def upsert(
        self,
        where: dict[str, Any],
        create: dict[str, Any],
        update: dict[str, Any],
    ) -> dict[str, Any]:
        """Update the row addressed by ``where``, or create it."""
        return self._write(
            Operation.UPSERT, WriteArgs(where=where, create=create, update=update)
        )

    def delete(self, where: dict[str, Any]) -> dict[str, Any]:
        """Physically delete one row addressed by a unique ``where``."""
        return self._write(Operation.DELETE, WriteArgs(where=where))

    def update_many(self, data: dict[str, Any], where: dict[str, Any] | None = None) -> int:
        """Update all rows matching ``where``; returns the affected count."""
        return self._write(Operation.UPDATE_MANY, WriteArgs(where=where, data=data))

    def delete_many(self, where: dict[str, Any] | None = None) -> int:
        """Physically delete all rows matching ``where``; returns the affected count."""
        return self._write(Operation.DELETE_MANY, WriteArgs(where=where))

    def _query(
        self,
        operation: Operation,
        args: QueryArgs | Mapping[str, Any] | None,
        kwargs: dict[str, Any],
    ) -> Any:
        return self.client.dispatch(
            QueryCall(model=self.model, operation=operation, args=_build_query_args(args, kwargs))
        )

    def _write(self, operation: Operation, args: WriteArgs) -> Any:
        return self.client.dispatch(QueryCall(model=self.model, operation=operation, args=args))


def _build_query_args(
    args: QueryArgs | Mapping[str, Any] | None,
    kwargs: dict[str, Any],
) -> QueryArgs:
    args = coerce_query_args(args)
    if not kwargs:
        return args
    return QueryArgs.model_validate({**args.to_dict(), **kwargs})
