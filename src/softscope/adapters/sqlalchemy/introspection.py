"""
SQLAlchemy schema introspection.

Extracts metadata from SQLAlchemy models to build the schema representation
consumed by the scoping engine.
"""

from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import RelationshipProperty
from sqlalchemy.sql.sqltypes import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    Integer,
    LargeBinary,
    String,
    Text,
    Time,
    Uuid,
)

from softscope.core.types import (
    FieldKind,
    FieldMetadata,
    FieldType,
    ModelMetadata,
    SchemaMetadata,
)

_TYPE_MAPPING: list[tuple[type, FieldType]] = [
    (String, FieldType.STRING),
    (Text, FieldType.STRING),
    (Integer, FieldType.INTEGER),
    (Float, FieldType.FLOAT),
    (Boolean, FieldType.BOOLEAN),
    (DateTime, FieldType.DATETIME),
    (Date, FieldType.DATE),
    (Time, FieldType.TIME),
    (Uuid, FieldType.UUID),
    (JSON, FieldType.JSON),
    (LargeBinary, FieldType.BINARY),
]


class SQLAlchemyIntrospector:
    """
    Introspects SQLAlchemy models to extract schema metadata.

    Columns become scalar fields; relationships become relation fields whose
    cardinality follows ``uselist``.
    """

    def __init__(self, models: list[type]) -> None:
        """
        Initialize with a list of SQLAlchemy model classes.

        Args:
            models: List of SQLAlchemy declarative model classes
        """
        self.models = models
        self._model_map: dict[str, type] = {
            self._get_model_name(m): m for m in models
        }

    def introspect(self) -> SchemaMetadata:
        """
        Introspect all registered models and return schema metadata.
        """
        return SchemaMetadata(
            models={
                self._get_model_name(model): self._introspect_model(model)
                for model in self.models
            }
        )

    def _get_model_name(self, model: type) -> str:
        """Get the name to use for a model."""
        return model.__name__

    def _introspect_model(self, model: type) -> ModelMetadata:
        """Introspect a single model."""
        mapper = inspect(model)

        fields: dict[str, FieldMetadata] = {}
        primary_keys: list[str] = []

        for column in mapper.columns:
            fields[column.key] = self._introspect_column(column)
            if column.primary_key:
                primary_keys.append(column.key)

        for rel in mapper.relationships:
            fields[rel.key] = self._introspect_relationship(rel)

        return ModelMetadata(
            name=self._get_model_name(model),
            table_name=mapper.local_table.name,
            fields=fields,
            primary_keys=primary_keys,
            description=model.__doc__,
        )

    def _introspect_column(self, column: Any) -> FieldMetadata:
        """Introspect a single column."""
        return FieldMetadata(
            name=column.key,
            kind=FieldKind.SCALAR,
            field_type=self._get_field_type(column.type).value,
            nullable=bool(column.nullable),
            primary_key=column.primary_key,
            unique=bool(column.unique),
            description=column.doc,
        )

    def _introspect_relationship(self, rel: RelationshipProperty) -> FieldMetadata:
        """Introspect a relationship."""
        return FieldMetadata(
            name=rel.key,
            kind=FieldKind.RELATION,
            nullable=not rel.uselist,
            target_model=self._get_model_name(rel.mapper.class_),
            is_list=bool(rel.uselist),
        )

    def _get_field_type(self, sa_type: Any) -> FieldType:
        """Map a SQLAlchemy type to a FieldType."""
        for sa_class, field_type in _TYPE_MAPPING:
            if isinstance(sa_type, sa_class):
                return field_type
        return FieldType.UNKNOWN

    def get_model_class(self, name: str) -> type | None:
        """Get the model class by name."""
        return self._model_map.get(name)

    @property
    def model_map(self) -> dict[str, type]:
        """Model name to class mapping."""
        return dict(self._model_map)
