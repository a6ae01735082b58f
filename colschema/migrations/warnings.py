"""Warning taxonomy for schema changes.

Each function below builds the warning for one kind of change, so the
classification of a change (kind and severity) lives in a single place.
Warnings are annotations only: they never change what SQL is generated.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .types import Severity, WarningKind


class MigrationWarning(BaseModel):
    """A risk annotation attached to a schema diff."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    kind: WarningKind
    severity: Severity
    message: str
    field_name: str | None = None

    def __str__(self) -> str:
        """Return a formatted string representation of the warning."""
        return f"[{self.severity.value}] {self.kind.value}: {self.message}"


def required_field_added(field_name: str) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.BREAKING_CHANGE,
        severity=Severity.HIGH,
        message=(
            f'Adding required field "{field_name}" without a default value will '
            "fail if table has existing data"
        ),
        field_name=field_name,
    )


def type_changed(field_name: str, old_kind: str, new_kind: str) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.BREAKING_CHANGE,
        severity=Severity.HIGH,
        message=(
            f'Changing field "{field_name}" from {old_kind} to {new_kind} may cause '
            "data loss or type conversion errors"
        ),
        field_name=field_name,
    )


def made_required(field_name: str) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.BREAKING_CHANGE,
        severity=Severity.HIGH,
        message=(
            f'Making field "{field_name}" required may fail if existing rows have '
            "NULL values"
        ),
        field_name=field_name,
    )


def unique_added(field_name: str) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.BREAKING_CHANGE,
        severity=Severity.MEDIUM,
        message=(
            f'Adding UNIQUE constraint to field "{field_name}" may fail if duplicate '
            "values exist"
        ),
        field_name=field_name,
    )


def default_changed(field_name: str) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.INFO,
        severity=Severity.LOW,
        message=(
            f'Default value for field "{field_name}" changed. This only affects new rows.'
        ),
        field_name=field_name,
    )


def max_length_reduced(field_name: str, old_length: int, new_length: int) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.DATA_LOSS,
        severity=Severity.HIGH,
        message=(
            f'Reducing max length of field "{field_name}" from {old_length} to '
            f"{new_length} may truncate existing data"
        ),
        field_name=field_name,
    )


def precision_changed(field_name: str) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.BREAKING_CHANGE,
        severity=Severity.MEDIUM,
        message=(
            f'Changing precision/scale of field "{field_name}" may cause data loss '
            "or rounding"
        ),
        field_name=field_name,
    )


def enum_values_removed(field_name: str, values: Iterable[str]) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.BREAKING_CHANGE,
        severity=Severity.HIGH,
        message=(
            f"Removing enum values [{', '.join(values)}] from field \"{field_name}\" "
            "may cause errors if these values exist in the database"
        ),
        field_name=field_name,
    )


def field_renamed(old_name: str, new_name: str) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.INFO,
        severity=Severity.LOW,
        message=(
            f'Field "{old_name}" appears to have been renamed to "{new_name}". '
            "The column will be renamed preserving all existing data."
        ),
        field_name=old_name,
    )


def field_removed(field_name: str) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.DATA_LOSS,
        severity=Severity.HIGH,
        message=(
            f'Removing field "{field_name}" will permanently delete all data in '
            "this column"
        ),
        field_name=field_name,
    )


def index_added(index_name: str) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.PERFORMANCE,
        severity=Severity.LOW,
        message=f'Adding index "{index_name}" may take time on large tables',
    )


def index_removed(index_name: str) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.PERFORMANCE,
        severity=Severity.MEDIUM,
        message=f'Removing index "{index_name}" may slow down queries that use it',
    )


def index_modified(index_name: str) -> MigrationWarning:
    return MigrationWarning(
        kind=WarningKind.BREAKING_CHANGE,
        severity=Severity.MEDIUM,
        message=f'Index "{index_name}" will be recreated with new configuration',
    )
