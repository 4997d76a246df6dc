"""
Soft-delete scope metadata.

Derives, once, the two lookup structures the rewriter needs from a schema
description: the set of soft-delete-enabled models and the relation fields
of every model.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from softscope.core.types import (
    SOFT_DELETE_FIELD,
    FieldKind,
    RelationMetadata,
    SchemaMetadata,
)

logger = logging.getLogger(__name__)

_EMPTY_RELATIONS: Mapping[str, RelationMetadata] = MappingProxyType({})


@dataclass(frozen=True)
class ScopeMetadata:
    """
    Read-only scoping metadata.

    Attributes:
        soft_delete_models: Models carrying the deletion-marker field
        relations_by_model: Model name -> relation field name -> descriptor
        soft_delete_field: Name of the deletion-marker field
    """

    soft_delete_models: frozenset[str] = frozenset()
    relations_by_model: Mapping[str, Mapping[str, RelationMetadata]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    soft_delete_field: str = SOFT_DELETE_FIELD

    def is_soft_delete(self, model: str) -> bool:
        """Check whether rows of ``model`` are scoped by default."""
        return model in self.soft_delete_models

    def relations_of(self, model: str) -> Mapping[str, RelationMetadata]:
        """Relation descriptors of ``model``; empty for unknown models."""
        return self.relations_by_model.get(model, _EMPTY_RELATIONS)

    def get_relation(self, model: str, name: str) -> RelationMetadata | None:
        """Look up a single relation descriptor."""
        return self.relations_of(model).get(name)


def build_scope_metadata(
    schema: SchemaMetadata,
    soft_delete_field: str = SOFT_DELETE_FIELD,
) -> ScopeMetadata:
    """
    Build scope metadata in a single pass over all models and fields.

    Relation targets are recorded by name as declared; they are resolved
    lazily at rewrite time, so declaration order does not matter.
    """
    soft_delete_models: set[str] = set()
    relations_by_model: dict[str, Mapping[str, RelationMetadata]] = {}

    for model in schema.models.values():
        relations: dict[str, RelationMetadata] = {}

        for model_field in model.fields.values():
            if model_field.name == soft_delete_field:
                soft_delete_models.add(model.name)

            if model_field.kind != FieldKind.RELATION:
                continue

            relations[model_field.name] = RelationMetadata(
                name=model_field.name,
                target_model=model_field.target_model,
                is_list=model_field.is_list,
            )

        relations_by_model[model.name] = MappingProxyType(relations)

    logger.debug(
        "Built scope metadata: %d models, %d soft-delete models",
        len(relations_by_model),
        len(soft_delete_models),
    )

    return ScopeMetadata(
        soft_delete_models=frozenset(soft_delete_models),
        relations_by_model=MappingProxyType(relations_by_model),
        soft_delete_field=soft_delete_field,
    )
