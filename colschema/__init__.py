"""colschema - declarative collection schemas, diffs and PostgreSQL DDL."""

from .core.schema import (
    CollectionDefinition,
    FieldDefinition,
    FieldKind,
    IndexDefinition,
    RelationConfig,
)
from .migrations.detector import SchemaDiff, diff_schemas
from .migrations.planner import MigrationPlan, plan_creation, plan_migration
from .sql.compiler import compile_alter_table, compile_create_table
from .validation import ValidationResult, validate_collection

__version__ = "0.1.0"

# Re-export main components for easy access
# Note: CLI components imported on-demand to keep the engine import light

__all__ = [
    "CollectionDefinition",
    "FieldDefinition",
    "FieldKind",
    "IndexDefinition",
    "MigrationPlan",
    "RelationConfig",
    "SchemaDiff",
    "ValidationResult",
    "__version__",
    "compile_alter_table",
    "compile_create_table",
    "diff_schemas",
    "plan_creation",
    "plan_migration",
    "validate_collection",
]
