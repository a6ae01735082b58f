"""Schema change detection and the warning taxonomy.

Planning (validate, diff and compile together) lives in
``colschema.migrations.planner``.
"""

from .detector import (
    FieldChange,
    FieldRename,
    IndexChange,
    SchemaDiff,
    SchemaDiffer,
    diff_schemas,
)
from .types import FieldAttribute, Severity, WarningKind
from .warnings import MigrationWarning

__all__ = [
    "FieldAttribute",
    "FieldChange",
    "FieldRename",
    "IndexChange",
    "MigrationWarning",
    "SchemaDiff",
    "SchemaDiffer",
    "Severity",
    "WarningKind",
    "diff_schemas",
]
