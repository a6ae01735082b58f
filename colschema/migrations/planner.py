"""Migration planning: validate, diff and compile in one step.

The planner is the engine's entry point for callers that hold two versions
of a collection. It never executes SQL and never persists anything; the plan
it returns is handed to whoever applies migrations.
"""

from dataclasses import dataclass, field
from typing import Any
import uuid

import structlog

from ..core.logging import OperationLogger, get_logger
from ..core.schema import CollectionDefinition
from ..exceptions import MigrationRefusedError
from ..sql.compiler import compile_alter_table, compile_create_table
from ..validation import CollectionValidator, NamingRules, ValidationError
from .detector import SchemaDiff, diff_schemas
from .types import WarningKind
from .warnings import MigrationWarning

logger = get_logger(__name__)


@dataclass
class MigrationPlan:
    """Outcome of planning a migration.

    When ``valid`` is false, ``errors`` explains why and no diff or SQL was
    produced.
    """

    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    diff: SchemaDiff | None = None
    sql: str | None = None
    table_name: str | None = None

    @property
    def warnings(self) -> list[MigrationWarning]:
        """Warnings attached to the diff, if one was computed."""
        return list(self.diff.warnings) if self.diff is not None else []

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary."""
        return {
            "valid": self.valid,
            "tableName": self.table_name,
            "errors": [error.to_dict() for error in self.errors],
            "diff": self.diff.to_dict() if self.diff is not None else None,
            "sql": self.sql,
        }


def _prefixed_errors(
    validator: CollectionValidator, definition: CollectionDefinition, prefix: str
) -> list[ValidationError]:
    result = validator.validate(definition)
    return [
        ValidationError(field=f"{prefix}.{error.field}", message=error.message, type=error.type)
        for error in result.errors
    ]


def plan_migration(
    old: CollectionDefinition,
    new: CollectionDefinition,
    table_name: str | None = None,
    require_safe: bool = False,
) -> MigrationPlan:
    """Plan the migration from one collection version to the next.

    Args:
        old: Definition currently applied to the table
        new: Definition to migrate to
        table_name: Physical table to alter (defaults to ``old.name``); must be
            a plain lowercase identifier
        require_safe: Refuse plans that carry data-loss warnings

    Returns:
        MigrationPlan with the diff and ALTER script, or validation errors

    Raises:
        MigrationRefusedError: If ``require_safe`` is set and the diff would
            destroy existing data
    """
    table = table_name or old.name

    with structlog.contextvars.bound_contextvars(plan_id=uuid.uuid4().hex[:12]):
        with OperationLogger(logger, "plan_migration", table=table) as operation:
            validator = CollectionValidator()
            errors = _prefixed_errors(validator, old, "old") + _prefixed_errors(
                validator, new, "new"
            )
            if table_name is not None:
                errors.extend(NamingRules.validate_table_name(table_name))
            if errors:
                operation.log_progress("Definitions invalid", error_count=len(errors))
                return MigrationPlan(valid=False, errors=errors, table_name=table)

            diff = diff_schemas(old, new)
            operation.log_progress(
                "Diff computed",
                has_changes=diff.has_changes,
                warning_count=len(diff.warnings),
            )

            if require_safe and diff.has_destructive_changes:
                destructive = diff.warnings_of(WarningKind.DATA_LOSS)
                raise MigrationRefusedError(
                    f"Migration of {table} refused: {len(destructive)} change(s) "
                    "may destroy existing data",
                    warnings=destructive,
                )

            sql = compile_alter_table(table, diff)
            return MigrationPlan(valid=True, diff=diff, sql=sql, table_name=table)


def plan_creation(definition: CollectionDefinition) -> MigrationPlan:
    """Plan the creation of a brand-new collection table."""
    with structlog.contextvars.bound_contextvars(plan_id=uuid.uuid4().hex[:12]):
        with OperationLogger(
            logger, "plan_creation", table=definition.name
        ) as operation:
            result = CollectionValidator().validate(definition)
            if not result.valid:
                operation.log_progress(
                    "Definition invalid", error_count=result.error_count
                )
                return MigrationPlan(
                    valid=False, errors=result.errors, table_name=definition.name
                )

            return MigrationPlan(
                valid=True,
                sql=compile_create_table(definition),
                table_name=definition.name,
            )
