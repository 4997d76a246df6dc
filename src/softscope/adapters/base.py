"""
Abstract query executor interface.

Executors perform the actual reads and writes behind a DataClient. The
scoping engine only ever rewrites the request; executors never see
anything but plain QueryCall objects.
"""

from abc import ABC, abstractmethod
from typing import Any

from softscope.core.context import QueryCall
from softscope.core.types import SchemaMetadata


class QueryExecutor(ABC):
    """
    Abstract base class for query executors.

    Executors are responsible for:
    1. Schema introspection
    2. Turning QueryCall arguments into ORM statements
    3. Running them and returning plain dict rows
    """

    @abstractmethod
    def introspect(self) -> SchemaMetadata:
        """
        Introspect the database schema.

        Returns metadata about all models, fields, and relations.
        Implementations should cache the result; it is treated as an
        immutable snapshot for the lifetime of the executor.
        """
        ...

    @abstractmethod
    def execute(self, call: QueryCall) -> Any:
        """
        Execute a call and return its result.

        Multi-row reads return a list of dicts, singular reads a dict or
        None, counts and bulk writes an int. Executors that do not
        implement an operation raise UnsupportedOperationError.
        """
        ...

    def model_names(self) -> list[str]:
        """List the models this executor can serve."""
        return self.introspect().list_models()
