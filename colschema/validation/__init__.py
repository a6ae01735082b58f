"""Validation of collection definitions.

This package checks naming and shape rules on a definition before it may be
diffed or compiled to SQL, collecting every problem instead of stopping at
the first one.
"""

from .engine import CollectionValidator, validate_collection
from .errors import ValidationError, ValidationResult
from .rules import (
    COLLECTION_NAME_PATTERN,
    IDENTIFIER_PATTERN,
    FieldRules,
    IndexRules,
    NamingRules,
)

__all__ = [
    "COLLECTION_NAME_PATTERN",
    "CollectionValidator",
    "FieldRules",
    "IDENTIFIER_PATTERN",
    "IndexRules",
    "NamingRules",
    "ValidationError",
    "ValidationResult",
    "validate_collection",
]
