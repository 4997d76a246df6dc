"""
softscope Core Module.

Contains the schema types, query argument trees, call context, and error taxonomy.
"""

from softscope.core.args import (
    OrderDirection,
    QueryArgs,
    RelationSelection,
    WriteArgs,
    coerce_query_args,
)
from softscope.core.context import (
    LIST_READ_OPERATIONS,
    QUERY_OPERATIONS,
    Operation,
    QueryCall,
)
from softscope.core.errors import (
    NotFoundError,
    SoftScopeError,
    UnknownModelError,
    UnsupportedOperationError,
    ValidationError,
)
from softscope.core.types import (
    SOFT_DELETE_FIELD,
    FieldKind,
    FieldMetadata,
    FieldType,
    ModelMetadata,
    RelationMetadata,
    SchemaMetadata,
)

__all__ = [
    # Args
    "QueryArgs",
    "WriteArgs",
    "RelationSelection",
    "OrderDirection",
    "coerce_query_args",
    # Context
    "Operation",
    "QueryCall",
    "LIST_READ_OPERATIONS",
    "QUERY_OPERATIONS",
    # Errors
    "SoftScopeError",
    "UnknownModelError",
    "ValidationError",
    "NotFoundError",
    "UnsupportedOperationError",
    # Types
    "SOFT_DELETE_FIELD",
    "FieldKind",
    "FieldType",
    "FieldMetadata",
    "RelationMetadata",
    "ModelMetadata",
    "SchemaMetadata",
]
