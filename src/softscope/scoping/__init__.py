"""
softscope Scoping Module.

Contains scope metadata extraction, the argument rewriter, and the client
extension that applies it.
"""

from softscope.scoping.extension import SoftDeleteHook, extend_with_soft_delete
from softscope.scoping.metadata import ScopeMetadata, build_scope_metadata
from softscope.scoping.rewriter import SoftDeleteScoper

__all__ = [
    # Metadata
    "ScopeMetadata",
    "build_scope_metadata",
    # Rewriter
    "SoftDeleteScoper",
    # Extension
    "SoftDeleteHook",
    "extend_with_soft_delete",
]
