"""
softscope Adapters Module.

Contains the abstract executor interface and the SQLAlchemy implementation.
"""

from softscope.adapters.base import QueryExecutor

__all__ = [
    "QueryExecutor",
]


def get_sqlalchemy_executor():
    """Get the SQLAlchemy executor class."""
    from softscope.adapters.sqlalchemy import SQLAlchemyExecutor
    return SQLAlchemyExecutor
