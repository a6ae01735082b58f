"""Schema change detection between two versions of a collection.

This module compares an old and a new collection definition field by field
and index by index, detects renames with a structural heuristic, and derives
the risk warnings for every classified change.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

from ..core.logging import get_logger
from ..core.schema import (
    CollectionDefinition,
    FieldDefinition,
    FieldKind,
    IndexDefinition,
)
from ..sql.types import effective_max_length
from . import warnings as warn
from .types import FieldAttribute, WarningKind
from .warnings import MigrationWarning

logger = get_logger(__name__)


class DiffModel(BaseModel):
    """Base model for diff records, serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel
    )


class FieldRename(DiffModel):
    """A removed field and an added field identified as the same column."""

    old_name: str
    new_name: str
    field: FieldDefinition


class FieldChange(DiffModel):
    """A field present in both versions whose attributes differ."""

    old_field: FieldDefinition
    new_field: FieldDefinition
    changed_attributes: tuple[FieldAttribute, ...]

    def has(self, *attributes: FieldAttribute) -> bool:
        """Whether any of the given attributes changed."""
        return any(attribute in self.changed_attributes for attribute in attributes)


class IndexChange(DiffModel):
    """An index whose field list or uniqueness differs between versions."""

    old_index: IndexDefinition
    new_index: IndexDefinition


class SchemaDiff(DiffModel):
    """Structural delta between two collection definitions."""

    added_fields: tuple[FieldDefinition, ...] = ()
    removed_fields: tuple[FieldDefinition, ...] = ()
    renamed_fields: tuple[FieldRename, ...] = ()
    modified_fields: tuple[FieldChange, ...] = ()
    added_indexes: tuple[IndexDefinition, ...] = ()
    removed_indexes: tuple[IndexDefinition, ...] = ()
    modified_indexes: tuple[IndexChange, ...] = ()
    warnings: tuple[MigrationWarning, ...] = ()

    @computed_field(alias="hasChanges")  # type: ignore[prop-decorator]
    @property
    def has_changes(self) -> bool:
        """Whether any field or index bucket is non-empty."""
        return bool(
            self.added_fields
            or self.removed_fields
            or self.renamed_fields
            or self.modified_fields
            or self.added_indexes
            or self.removed_indexes
            or self.modified_indexes
        )

    @property
    def has_destructive_changes(self) -> bool:
        """Whether applying the diff may destroy existing data."""
        return bool(self.warnings_of(WarningKind.DATA_LOSS))

    def warnings_of(self, kind: WarningKind) -> list[MigrationWarning]:
        """Warnings of the given kind, in diff order."""
        return [warning for warning in self.warnings if warning.kind == kind]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON form."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def _normalize_numbers(value: Any) -> Any:
    """Fold integral floats to ints so ``1`` and ``1.0`` compare equal."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {key: _normalize_numbers(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_numbers(item) for item in value]
    return value


def _json_equal(left: Any, right: Any) -> bool:
    """Deep equality on the JSON form of two values."""
    return json.dumps(
        _normalize_numbers(left), sort_keys=True, default=str
    ) == json.dumps(_normalize_numbers(right), sort_keys=True, default=str)


def _validation_dump(field_def: FieldDefinition) -> dict[str, Any] | None:
    if field_def.validation is None:
        return None
    return field_def.validation.model_dump(exclude_none=True)


class SchemaDiffer:
    """Computes the SchemaDiff between two collection definitions.

    Both definitions are assumed to have passed validation; the differ trusts
    its input and performs no re-validation.
    """

    def diff(self, old: CollectionDefinition, new: CollectionDefinition) -> SchemaDiff:
        """Compare two definitions.

        Args:
            old: The definition currently applied to the table
            new: The definition to migrate to

        Returns:
            SchemaDiff with every classified change and its warnings
        """
        old_fields = {field_def.name: field_def for field_def in old.fields}
        new_fields = {field_def.name: field_def for field_def in new.fields}

        candidate_added = [f for f in new.fields if f.name not in old_fields]
        candidate_removed = [f for f in old.fields if f.name not in new_fields]

        modified: list[FieldChange] = []
        modified_warnings: list[MigrationWarning] = []
        for old_field in old.fields:
            new_field = new_fields.get(old_field.name)
            if new_field is None:
                continue

            changed, field_warnings = self._compare_fields(old_field, new_field)
            modified_warnings.extend(field_warnings)
            if changed:
                modified.append(
                    FieldChange(
                        old_field=old_field,
                        new_field=new_field,
                        changed_attributes=tuple(changed),
                    )
                )

        renames, added, removed = self._detect_renames(
            candidate_removed, candidate_added
        )

        added_warnings = [
            warn.required_field_added(f.name)
            for f in added
            if f.required and not f.has_default
        ]
        rename_warnings = [
            warn.field_renamed(rename.old_name, rename.new_name) for rename in renames
        ]
        removed_warnings = [warn.field_removed(f.name) for f in removed]

        added_indexes, removed_indexes, modified_indexes, index_warnings = (
            self._diff_indexes(old.indexes, new.indexes)
        )

        result = SchemaDiff(
            added_fields=tuple(added),
            removed_fields=tuple(removed),
            renamed_fields=tuple(renames),
            modified_fields=tuple(modified),
            added_indexes=tuple(added_indexes),
            removed_indexes=tuple(removed_indexes),
            modified_indexes=tuple(modified_indexes),
            warnings=tuple(
                added_warnings
                + modified_warnings
                + rename_warnings
                + removed_warnings
                + index_warnings
            ),
        )

        logger.debug(
            "Schema diff computed",
            collection=new.name,
            added=len(result.added_fields),
            removed=len(result.removed_fields),
            renamed=len(result.renamed_fields),
            modified=len(result.modified_fields),
            index_changes=len(added_indexes)
            + len(removed_indexes)
            + len(modified_indexes),
            warnings=len(result.warnings),
        )
        return result

    def _compare_fields(
        self, old: FieldDefinition, new: FieldDefinition
    ) -> tuple[list[FieldAttribute], list[MigrationWarning]]:
        """Compare a field present in both versions.

        Returns the changed attributes, in comparison order, and the warnings
        they raise.
        """
        changed: list[FieldAttribute] = []
        warnings: list[MigrationWarning] = []
        name = old.name

        if old.kind != new.kind:
            changed.append(FieldAttribute.TYPE)
            warnings.append(warn.type_changed(name, old.kind.value, new.kind.value))

        if old.required != new.required:
            changed.append(FieldAttribute.REQUIRED)
            if new.required:
                warnings.append(warn.made_required(name))

        if old.unique != new.unique:
            changed.append(FieldAttribute.UNIQUE)
            if new.unique:
                warnings.append(warn.unique_added(name))

        if not _json_equal(old.default_value, new.default_value):
            changed.append(FieldAttribute.DEFAULT_VALUE)
            warnings.append(warn.default_changed(name))

        if not _json_equal(_validation_dump(old), _validation_dump(new)):
            changed.append(FieldAttribute.VALIDATION)

        if old.max_length != new.max_length:
            changed.append(FieldAttribute.MAX)
            old_length = effective_max_length(old)
            new_length = effective_max_length(new)
            if new_length < old_length:
                warnings.append(warn.max_length_reduced(name, old_length, new_length))

        if old.precision != new.precision or old.scale != new.scale:
            if old.precision != new.precision:
                changed.append(FieldAttribute.PRECISION)
            if old.scale != new.scale:
                changed.append(FieldAttribute.SCALE)
            warnings.append(warn.precision_changed(name))

        if old.enum_values != new.enum_values:
            changed.append(FieldAttribute.ENUM_VALUES)
            kept = set(new.enum_values or ())
            dropped = [value for value in old.enum_values or () if value not in kept]
            if dropped:
                warnings.append(warn.enum_values_removed(name, dropped))

        return changed, warnings

    def _detect_renames(
        self,
        removed: list[FieldDefinition],
        added: list[FieldDefinition],
    ) -> tuple[list[FieldRename], list[FieldDefinition], list[FieldDefinition]]:
        """Pair removed and added fields that look like the same column.

        Greedy and first-match: removals are visited in old declaration order
        and each takes the first unmatched structurally equal addition.
        """
        renames: list[FieldRename] = []
        matched_added: set[int] = set()
        matched_removed: set[int] = set()

        for removed_index, removed_field in enumerate(removed):
            for added_index, added_field in enumerate(added):
                if added_index in matched_added:
                    continue
                if not self._is_same_shape(removed_field, added_field):
                    continue

                renames.append(
                    FieldRename(
                        old_name=removed_field.name,
                        new_name=added_field.name,
                        field=added_field,
                    )
                )
                matched_added.add(added_index)
                matched_removed.add(removed_index)
                logger.debug(
                    "Rename detected",
                    old_name=removed_field.name,
                    new_name=added_field.name,
                )
                break

        remaining_added = [f for i, f in enumerate(added) if i not in matched_added]
        remaining_removed = [
            f for i, f in enumerate(removed) if i not in matched_removed
        ]
        return renames, remaining_added, remaining_removed

    @staticmethod
    def _is_same_shape(old: FieldDefinition, new: FieldDefinition) -> bool:
        """Structural equality used by the rename heuristic."""
        if old.kind != new.kind:
            return False
        if old.required != new.required or old.unique != new.unique:
            return False
        if not _json_equal(old.default_value, new.default_value):
            return False
        if old.kind == FieldKind.ENUM and old.enum_values != new.enum_values:
            return False
        if old.kind == FieldKind.DECIMAL and (old.precision, old.scale) != (
            new.precision,
            new.scale,
        ):
            return False
        return True

    def _diff_indexes(
        self,
        old_indexes: tuple[IndexDefinition, ...],
        new_indexes: tuple[IndexDefinition, ...],
    ) -> tuple[
        list[IndexDefinition],
        list[IndexDefinition],
        list[IndexChange],
        list[MigrationWarning],
    ]:
        """Diff indexes by name; field order is significant."""
        old_by_name = {index.name: index for index in old_indexes}
        new_by_name = {index.name: index for index in new_indexes}
        warnings: list[MigrationWarning] = []

        added = [index for index in new_indexes if index.name not in old_by_name]
        warnings.extend(warn.index_added(index.name) for index in added)

        removed: list[IndexDefinition] = []
        modified: list[IndexChange] = []
        for old_index in old_indexes:
            new_index = new_by_name.get(old_index.name)
            if new_index is None:
                removed.append(old_index)
                warnings.append(warn.index_removed(old_index.name))
            elif (
                old_index.fields != new_index.fields
                or old_index.unique != new_index.unique
            ):
                modified.append(IndexChange(old_index=old_index, new_index=new_index))
                warnings.append(warn.index_modified(old_index.name))

        return added, removed, modified, warnings


def diff_schemas(old: CollectionDefinition, new: CollectionDefinition) -> SchemaDiff:
    """Compute the SchemaDiff between two validated definitions."""
    return SchemaDiffer().diff(old, new)
