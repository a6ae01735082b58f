"""Type definitions for schema change classification."""

from enum import Enum


class WarningKind(str, Enum):
    """Risk classification of a schema change."""

    DATA_LOSS = "data_loss"
    BREAKING_CHANGE = "breaking_change"
    PERFORMANCE = "performance"
    INFO = "info"


class Severity(str, Enum):
    """How urgently an operator should look at a warning."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FieldAttribute(str, Enum):
    """Attributes compared when a field exists in both schema versions."""

    TYPE = "type"
    REQUIRED = "required"
    UNIQUE = "unique"
    DEFAULT_VALUE = "defaultValue"
    VALIDATION = "validation"
    MAX = "max"
    PRECISION = "precision"
    SCALE = "scale"
    ENUM_VALUES = "enumValues"


# Attribute changes that alter the physical column type
TYPE_AFFECTING_ATTRIBUTES = frozenset(
    {
        FieldAttribute.TYPE,
        FieldAttribute.MAX,
        FieldAttribute.PRECISION,
        FieldAttribute.SCALE,
    }
)
