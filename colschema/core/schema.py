"""Core data structures for declarative collection definitions.

This module defines the immutable models used to describe a collection: a
physical table made of typed fields, indexes and relations. Definitions are
parsed from JSON/YAML payloads using camelCase keys and are never mutated by
the engine.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class FieldKind(str, Enum):
    """The fixed catalog of field kinds a collection may declare."""

    TEXT = "text"
    LONGTEXT = "longtext"
    RICHTEXT = "richtext"
    INTEGER = "integer"
    DECIMAL = "decimal"
    DATE = "date"
    DATETIME = "datetime"
    BOOLEAN = "boolean"
    ENUM = "enum"
    JSON = "json"
    RELATION = "relation"
    MEDIA = "media"


class DefinitionModel(BaseModel):
    """Base model for definition payloads.

    Accepts both camelCase payload keys and Python attribute names, and
    serializes back to camelCase with ``model_dump(by_alias=True)``.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class FieldValidation(DefinitionModel):
    """Application-level value constraints carried with a field."""

    min: float | None = None
    max: float | None = None
    regex: str | None = None


class RelationConfig(DefinitionModel):
    """Foreign key configuration for relation fields."""

    target_collection: str | None = None
    cascade_delete: bool = False
    foreign_key_name: str | None = None
    relation_type: Literal["one-to-one", "one-to-many", "many-to-many"] = (
        "one-to-many"
    )


class FieldDefinition(DefinitionModel):
    """Definition of a single column.

    Only shapes and types are enforced here. Per-kind invariants (enum values,
    relation targets, decimal scale) are checked by the collection validator so
    that all problems can be reported together.
    """

    name: str
    kind: FieldKind = Field(
        validation_alias=AliasChoices("kind", "type"), serialization_alias="kind"
    )
    required: bool = False
    unique: bool = False
    default_value: Any = None
    description: str | None = None
    validation: FieldValidation | None = None

    # Kind-specific parameters
    max_length: int | None = Field(
        default=None,
        validation_alias=AliasChoices("maxLength", "max_length", "max"),
        serialization_alias="maxLength",
    )
    precision: int | None = None
    scale: int | None = None
    enum_values: tuple[str, ...] | None = None
    relation: RelationConfig | None = Field(
        default=None,
        validation_alias=AliasChoices("relation", "relationConfig", "relation_config"),
        serialization_alias="relation",
    )

    @model_validator(mode="before")
    @classmethod
    def _fold_decimal_places(cls, data: Any) -> Any:
        """Use the legacy ``decimalPlaces`` key as ``scale`` when scale is unset."""
        if not isinstance(data, dict):
            return data

        legacy = data.get("decimalPlaces", data.get("decimal_places"))
        if legacy is not None and data.get("scale") is None:
            data = {**data, "scale": legacy}
        return data

    @property
    def has_default(self) -> bool:
        """Whether the field declares a default value."""
        return self.default_value is not None


class IndexDefinition(DefinitionModel):
    """Definition of a (possibly unique) index over one or more fields."""

    name: str
    fields: tuple[str, ...]
    unique: bool = False


class CollectionDefinition(DefinitionModel):
    """Versioned snapshot of a collection schema.

    ``name`` is the physical table identifier. Field order is column order.
    """

    name: str
    api_name: str
    display_name: str
    description: str | None = None
    icon: str | None = None
    fields: tuple[FieldDefinition, ...] = ()
    indexes: tuple[IndexDefinition, ...] = ()

    def get_field(self, name: str) -> FieldDefinition | None:
        """Return the field with the given name, if declared."""
        for field_def in self.fields:
            if field_def.name == name:
                return field_def
        return None

    @property
    def field_names(self) -> list[str]:
        """Declared field names in column order."""
        return [field_def.name for field_def in self.fields]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON form."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
