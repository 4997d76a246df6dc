"""
softscope - transparent soft-delete scoping for SQLAlchemy data access.

softscope routes model operations through a small client whose multi-row
reads exclude soft-deleted rows by default, at the root and through every
nested relation include, while an explicit unscoped view keeps full history
one call away.
"""

__version__ = "0.1.0"

from softscope.client import DataClient, LoggingHook, ModelDelegate, QueryHook
from softscope.config import ScopeConfig
from softscope.core.args import QueryArgs, WriteArgs
from softscope.core.context import LIST_READ_OPERATIONS, Operation, QueryCall
from softscope.core.errors import (
    NotFoundError,
    SoftScopeError,
    UnknownModelError,
    UnsupportedOperationError,
    ValidationError,
)
from softscope.scoping import (
    ScopeMetadata,
    SoftDeleteHook,
    SoftDeleteScoper,
    build_scope_metadata,
    extend_with_soft_delete,
)

__all__ = [
    # Version
    "__version__",
    # Client
    "DataClient",
    "ModelDelegate",
    "QueryHook",
    "LoggingHook",
    # Config
    "ScopeConfig",
    # Args and calls
    "QueryArgs",
    "WriteArgs",
    "QueryCall",
    "Operation",
    "LIST_READ_OPERATIONS",
    # Scoping
    "ScopeMetadata",
    "build_scope_metadata",
    "SoftDeleteScoper",
    "SoftDeleteHook",
    "extend_with_soft_delete",
    # Errors
    "SoftScopeError",
    "UnknownModelError",
    "ValidationError",
    "NotFoundError",
    "UnsupportedOperationError",
]
