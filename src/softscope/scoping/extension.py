"""
Soft-delete scoping extension for DataClient.

Registers a hook on multi-row reads that scopes their arguments to rows
whose deletion marker is null. Singular lookups and writes are never
intercepted, so a known key always resolves regardless of deletion state.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any

from softscope.client.client import DataClient
from softscope.client.hooks import Handler, QueryHook
from softscope.config import ScopeConfig
from softscope.core.args import QueryArgs
from softscope.core.context import LIST_READ_OPERATIONS, Operation, QueryCall
from softscope.core.types import SOFT_DELETE_FIELD, SchemaMetadata
from softscope.scoping.metadata import ScopeMetadata, build_scope_metadata
from softscope.scoping.rewriter import SoftDeleteScoper

logger = logging.getLogger(__name__)


class SoftDeleteHook(QueryHook):
    """
    Scopes multi-row reads to non-deleted rows.

    Scope metadata is derived from the schema on the first intercepted call
    and reused, unchanged, for the lifetime of the hook.
    """

    name = "soft-delete-scope"
    scoping = True

    def __init__(
        self,
        schema_loader: Callable[[], SchemaMetadata] | None = None,
        *,
        metadata: ScopeMetadata | None = None,
        soft_delete_field: str = SOFT_DELETE_FIELD,
        operations: frozenset[Operation] = LIST_READ_OPERATIONS,
    ) -> None:
        """
        Initialize the hook.

        Args:
            schema_loader: Returns the schema snapshot to derive metadata from
            metadata: Already-derived metadata, used instead of a loader
            soft_delete_field: Name of the deletion-marker field
            operations: Operations to scope
        """
        if schema_loader is None and metadata is None:
            raise ValueError("One of schema_loader or metadata is required")

        self._schema_loader = schema_loader
        self.soft_delete_field = metadata.soft_delete_field if metadata is not None else soft_delete_field
        self.operations = frozenset(operations)
        self._scoper = SoftDeleteScoper(metadata) if metadata is not None else None
        self._lock = threading.Lock()

    @property
    def scoper(self) -> SoftDeleteScoper:
        """The rewriter, built on first use."""
        if self._scoper is None:
            with self._lock:
                if self._scoper is None:
                    metadata = build_scope_metadata(self._schema_loader(), self.soft_delete_field)
                    self._scoper = SoftDeleteScoper(metadata)
        return self._scoper

    @property
    def metadata(self) -> ScopeMetadata:
        """The scope metadata in use."""
        return self.scoper.metadata

    def __call__(self, call: QueryCall, proceed: Handler) -> Any:
        if not isinstance(call.args, QueryArgs):
            return proceed(call)

        args = self.scoper.scope_find_many_args(call.model, call.args)
        logger.debug("Scoped %s.%s to non-deleted rows", call.model, call.operation.value)
        return proceed(call.with_args(args))


def extend_with_soft_delete(
    client: DataClient,
    config: ScopeConfig | None = None,
) -> DataClient:
    """
    Return a client whose multi-row reads exclude soft-deleted rows.

    ``with_deleted()`` on the returned client gives the unscoped view. Only
    the scoping settings of ``config`` are used here; see
    ``ScopeConfig.apply_logging`` for its logging settings.
    """
    config = config or ScopeConfig()
    hook = SoftDeleteHook(
        client.executor.introspect,
        soft_delete_field=config.soft_delete_field,
        operations=config.scoped_operations,
    )
    return client.use(hook)
