"""Mapping from field kinds to PostgreSQL column types."""

import re

from ..core.schema import FieldDefinition, FieldKind

DEFAULT_TEXT_LENGTH = 255
DEFAULT_PRECISION = 10
DEFAULT_SCALE = 2

# Kinds whose column type does not depend on field parameters
FIELD_TYPE_MAP: dict[FieldKind, str] = {
    FieldKind.LONGTEXT: "TEXT",
    FieldKind.RICHTEXT: "TEXT",
    FieldKind.MEDIA: "TEXT",
    FieldKind.INTEGER: "INTEGER",
    FieldKind.DATE: "DATE",
    FieldKind.DATETIME: "TIMESTAMP WITH TIME ZONE",
    FieldKind.BOOLEAN: "BOOLEAN",
    FieldKind.JSON: "JSONB",
    FieldKind.RELATION: "INTEGER",
}

_UPPER = re.compile(r"[A-Z]")


def to_snake_case(name: str) -> str:
    """Convert a camelCase name to snake_case (``createdBy`` -> ``created_by``)."""
    return _UPPER.sub(lambda match: f"_{match.group(0).lower()}", name)


def column_name(field: FieldDefinition) -> str:
    """Physical column name for a field."""
    return to_snake_case(field.name)


def enum_type_name(field: FieldDefinition) -> str:
    """Name of the PostgreSQL enum type created for an enum field."""
    return f"{to_snake_case(field.name)}_enum"


def effective_max_length(field: FieldDefinition) -> int:
    """VARCHAR length used for a text field."""
    return field.max_length or DEFAULT_TEXT_LENGTH


def physical_type(field: FieldDefinition) -> str:
    """Return the PostgreSQL column type for a field.

    Enum fields map to a named type that must be created separately with
    ``CREATE TYPE ... AS ENUM``; the values are never inlined.
    """
    if field.kind == FieldKind.TEXT:
        return f"VARCHAR({effective_max_length(field)})"

    if field.kind == FieldKind.DECIMAL:
        precision = field.precision or DEFAULT_PRECISION
        scale = field.scale if field.scale is not None else DEFAULT_SCALE
        return f"NUMERIC({precision}, {scale})"

    if field.kind == FieldKind.ENUM:
        return enum_type_name(field)

    return FIELD_TYPE_MAP[field.kind]
