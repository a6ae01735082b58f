"""Core functionality for collection definitions."""

from .loader import load_definition, read_definition_data
from .logging import (
    OperationLogger,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)
from .schema import (
    CollectionDefinition,
    FieldDefinition,
    FieldKind,
    FieldValidation,
    IndexDefinition,
    RelationConfig,
)

# Export all components
__all__ = [
    # Definition model
    "CollectionDefinition",
    "FieldDefinition",
    "FieldKind",
    "FieldValidation",
    "IndexDefinition",
    "RelationConfig",
    # Loading
    "load_definition",
    "read_definition_data",
    # Logging
    "OperationLogger",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
]
