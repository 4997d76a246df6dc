"""
Query argument trees for softscope.

A read request is a recursive tree: the root carries an optional ``where``
predicate and optional ``include`` / ``select`` containers. Each container
maps a field name to either a flag (``True`` means "include with no extra
shaping") or a nested ``QueryArgs`` scoped to the relation's target model.

Example:
    {
        "where": {"email": {"ends_with": "@example.com"}},
        "order_by": {"id": "asc"},
        "include": {
            "posts": {"where": {"published": True}, "include": {"comments": True}},
            "profile": True,
        },
    }

Trees are frozen: transformations always build new instances, so a tree
shared between callers is never altered.
"""

from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, Field, field_validator

# Keys under which relation selections may appear.
RELATION_CONTAINERS = ("include", "select")


class OrderDirection(str, Enum):
    """Sort order direction."""

    ASC = "asc"
    DESC = "desc"


RelationSelection = Union[bool, "QueryArgs"]


class QueryArgs(BaseModel):
    """
    Arguments of a multi-row read.

    ``where`` is an opaque predicate as far as scoping is concerned; it is
    only interpreted by the executor. Keys not declared here are kept as
    extras and passed through to the executor unchanged.
    """

    where: dict[str, Any] | None = Field(default=None, description="Filter predicate")
    include: dict[str, RelationSelection] | None = Field(
        default=None, description="Relations to load alongside all scalar fields"
    )
    select: dict[str, RelationSelection] | None = Field(
        default=None, description="Fields and relations to return"
    )
    # Paging and ordering are checked by the executor
    order_by: Any = Field(default=None, description="Sort order")
    take: Any = Field(default=None, description="Maximum number of rows")
    skip: Any = Field(default=None, description="Rows to skip")

    model_config = {"frozen": True, "extra": "allow"}

    @field_validator("include", "select", mode="before")
    @classmethod
    def _none_selection_is_false(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {name: False if entry is None else entry for name, entry in value.items()}
        return value

    def relation_containers(self) -> Iterator[tuple[str, dict[str, RelationSelection]]]:
        """Yield the ``include`` / ``select`` containers that are present."""
        for key in RELATION_CONTAINERS:
            container = getattr(self, key)
            if container is not None:
                yield key, container

    def to_dict(self) -> dict[str, Any]:
        """Convert back to a plain nested dict, omitting unset keys."""
        data: dict[str, Any] = {}
        if self.where is not None:
            data["where"] = self.where
        for key, container in self.relation_containers():
            data[key] = {
                name: value if isinstance(value, bool) else value.to_dict()
                for name, value in container.items()
            }
        if self.order_by is not None:
            data["order_by"] = self.order_by
        if self.take is not None:
            data["take"] = self.take
        if self.skip is not None:
            data["skip"] = self.skip
        if self.model_extra:
            data.update(self.model_extra)
        return data


QueryArgs.model_rebuild()


class WriteArgs(BaseModel):
    """
    Arguments of a write or singular operation.

    Examples:
        {"data": {"email": "a@example.com"}}
        {"where": {"id": 3}, "data": {"deleted_at": "2024-01-01T00:00:00"}}
        {"where": {"email": "a@example.com"}, "create": {...}, "update": {...}}
    """

    where: dict[str, Any] | None = None
    data: dict[str, Any] | None = None
    create: dict[str, Any] | None = None
    update: dict[str, Any] | None = None

    model_config = {"frozen": True}


def coerce_query_args(raw: "QueryArgs | Mapping[str, Any] | None") -> QueryArgs:
    """Turn caller input into a ``QueryArgs`` tree."""
    if raw is None:
        return QueryArgs()
    if isinstance(raw, QueryArgs):
        return raw
    if isinstance(raw, Mapping):
        return QueryArgs.model_validate(dict(raw))
    raise TypeError(f"Query arguments must be a mapping, got {type(raw).__name__}")
