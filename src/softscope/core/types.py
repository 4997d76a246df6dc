"""
Shared schema type definitions for softscope.

These models describe a relational schema the way the scoping engine needs
to see it: entity types, their fields, and which fields are relations to
which other entity types.
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

# Reserved name of the nullable deletion-timestamp column.
SOFT_DELETE_FIELD = "deleted_at"


class FieldKind(str, Enum):
    """Kind of a model field."""

    SCALAR = "scalar"
    RELATION = "relation"


class FieldType(str, Enum):
    """Supported scalar field types."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    DATE = "date"
    TIME = "time"
    UUID = "uuid"
    JSON = "json"
    BINARY = "binary"
    UNKNOWN = "unknown"


class FieldMetadata(BaseModel):
    """
    Metadata for a single model field.

    Relation fields carry the name of the target entity type and whether the
    relation is a collection (one-to-many / many-to-many) or singular.
    """

    name: str
    kind: FieldKind = FieldKind.SCALAR
    field_type: str = FieldType.UNKNOWN.value
    nullable: bool = False
    primary_key: bool = False
    unique: bool = False
    target_model: str | None = None
    is_list: bool = False
    description: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_relation_target(self) -> "FieldMetadata":
        """Relation fields must name their target entity type."""
        if self.kind == FieldKind.RELATION and not self.target_model:
            raise ValueError(f"Relation field '{self.name}' has no target model")
        return self


class RelationMetadata(BaseModel):
    """Descriptor of a relation field: its target and cardinality."""

    name: str
    target_model: str
    is_list: bool = False

    model_config = {"frozen": True}


class ModelMetadata(BaseModel):
    """Metadata for a database model (entity type)."""

    name: str
    table_name: str | None = None
    fields: dict[str, FieldMetadata] = Field(default_factory=dict)
    primary_keys: list[str] = Field(default_factory=list)
    description: str | None = None

    model_config = {"frozen": True}

    def has_field(self, name: str) -> bool:
        """Check whether the model declares a field with the given name."""
        return name in self.fields

    def relation_fields(self) -> list[FieldMetadata]:
        """List the relation fields of this model."""
        return [f for f in self.fields.values() if f.kind == FieldKind.RELATION]

    def scalar_fields(self) -> list[FieldMetadata]:
        """List the scalar fields of this model."""
        return [f for f in self.fields.values() if f.kind == FieldKind.SCALAR]


class SchemaMetadata(BaseModel):
    """Complete schema metadata for all models."""

    models: dict[str, ModelMetadata] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def get_model(self, name: str) -> ModelMetadata | None:
        """Get metadata for a specific model."""
        return self.models.get(name)

    def list_models(self) -> list[str]:
        """List all model names."""
        return list(self.models.keys())
