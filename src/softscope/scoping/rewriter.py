"""
Soft-delete scope rewriting for query argument trees.

The SoftDeleteScoper takes the arguments of a multi-row read and returns a
new tree in which every level that reads a soft-delete-enabled model has
its ``where`` clause AND-ed with "deletion marker is null". Only list
relations into scoped models are filtered at nested levels; singular
relations are left alone.
"""

import logging
from collections.abc import Mapping
from typing import Any

from softscope.core.args import QueryArgs, RelationSelection, coerce_query_args
from softscope.core.types import RelationMetadata
from softscope.scoping.metadata import ScopeMetadata

logger = logging.getLogger(__name__)


class SoftDeleteScoper:
    """
    Injects the deletion predicate into query argument trees.

    The scoper is a pure transformation: it reads the immutable metadata and
    the caller's tree and returns a fresh tree. Recursion follows the
    caller's include/select nesting, never the schema graph, so cyclic
    schemas are safe.
    """

    def __init__(self, metadata: ScopeMetadata) -> None:
        self.metadata = metadata
        self.soft_delete_field = metadata.soft_delete_field

    def deleted_filter(self) -> dict[str, Any]:
        """The "not deleted" predicate."""
        return {self.soft_delete_field: None}

    def merge_where(self, where: dict[str, Any] | None) -> dict[str, Any]:
        """
        AND a caller predicate with the deletion predicate.

        The caller's predicate is embedded verbatim, never rewritten.
        """
        if where is None:
            return self.deleted_filter()
        return {"AND": [where, self.deleted_filter()]}

    def scope_find_many_args(
        self,
        model: str,
        args: QueryArgs | Mapping[str, Any] | None,
    ) -> QueryArgs:
        """
        Scope the arguments of a multi-row read on ``model``.

        Models without the deletion marker keep their ``where`` untouched;
        nested relations are scoped either way.
        """
        scoped = coerce_query_args(args)

        if self.metadata.is_soft_delete(model):
            scoped = scoped.model_copy(update={"where": self.merge_where(scoped.where)})

        return self.scope_relations(model, scoped)

    def scope_relations(self, model: str, args: QueryArgs) -> QueryArgs:
        """Scope the ``include`` / ``select`` containers of ``args``."""
        relations = self.metadata.relations_of(model)
        if not relations:
            return args

        update: dict[str, dict[str, RelationSelection]] = {}
        for key, container in args.relation_containers():
            update[key] = {
                name: self._scope_selection(relations.get(name), selection)
                for name, selection in container.items()
            }

        if not update:
            return args
        return args.model_copy(update=update)

    def _scope_selection(
        self,
        relation: RelationMetadata | None,
        selection: RelationSelection,
    ) -> RelationSelection:
        """Scope one entry of an include/select container."""
        if relation is None:
            # Scalar selection or unknown relation
            return selection

        filtered = relation.is_list and self.metadata.is_soft_delete(relation.target_model)

        if isinstance(selection, bool):
            if selection and filtered:
                return QueryArgs(where=self.deleted_filter())
            return selection

        if filtered:
            selection = selection.model_copy(update={"where": self.merge_where(selection.where)})

        return self.scope_relations(relation.target_model, selection)
