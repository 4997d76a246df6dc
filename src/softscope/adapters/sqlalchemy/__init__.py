"""
SQLAlchemy executor for softscope.

Provides integration with SQLAlchemy 2.0+ declarative models.
"""

from softscope.adapters.sqlalchemy.compiler import SQLAlchemyCompiler
from softscope.adapters.sqlalchemy.executor import SQLAlchemyExecutor
from softscope.adapters.sqlalchemy.introspection import SQLAlchemyIntrospector
from softscope.adapters.sqlalchemy.session import SessionManager

__all__ = [
    "SQLAlchemyExecutor",
    "SQLAlchemyIntrospector",
    "SQLAlchemyCompiler",
    "SessionManager",
]
