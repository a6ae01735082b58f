"""Rule implementations used by the collection validator.

Each rule group inspects one part of a collection definition and returns the
list of problems it found. Rules never raise and never stop early.
"""

import re
from typing import ClassVar

from ..core.schema import CollectionDefinition, FieldDefinition, FieldKind
from .errors import ValidationError

COLLECTION_NAME_PATTERN = re.compile(r"[a-z_]+")
IDENTIFIER_PATTERN = re.compile(r"[a-z_][a-z0-9_]*")


class NamingRules:
    """Collection-level naming rules."""

    RESERVED_NAMES: ClassVar[frozenset[str]] = frozenset(
        {
            "user",
            "users",
            "admin",
            "admins",
            "system",
            "schema",
            "table",
            "database",
            "index",
            "key",
            "constraint",
            "trigger",
            "view",
            "procedure",
            "function",
        }
    )

    @classmethod
    def validate_table_name(cls, table_name: str) -> list[ValidationError]:
        """Check a physical table name supplied alongside a definition."""
        if IDENTIFIER_PATTERN.fullmatch(table_name):
            return []
        return [
            ValidationError(
                field="tableName",
                message=(
                    f'Table name "{table_name}" must start with a letter or underscore '
                    "and contain only lowercase letters, digits and underscores"
                ),
                type="invalid_table_name",
            )
        ]

    @classmethod
    def validate(cls, definition: CollectionDefinition) -> list[ValidationError]:
        """Check the table name, API name and display name."""
        errors: list[ValidationError] = []

        if not definition.name or not COLLECTION_NAME_PATTERN.fullmatch(definition.name):
            errors.append(
                ValidationError(
                    field="name",
                    message="Name must be lowercase with underscores only (e.g., blog_posts)",
                    type="invalid_name",
                )
            )

        if definition.name.lower() in cls.RESERVED_NAMES:
            errors.append(
                ValidationError(
                    field="name",
                    message=f'Name "{definition.name}" is reserved and cannot be used',
                    type="reserved_name",
                )
            )

        if not definition.api_name or not COLLECTION_NAME_PATTERN.fullmatch(
            definition.api_name
        ):
            errors.append(
                ValidationError(
                    field="apiName",
                    message="API name must be lowercase with underscores only",
                    type="invalid_api_name",
                )
            )

        if not definition.display_name or not definition.display_name.strip():
            errors.append(
                ValidationError(
                    field="displayName",
                    message="Display name is required",
                    type="missing_display_name",
                )
            )

        return errors


class FieldRules:
    """Field list rules: presence, naming, and per-kind shape."""

    # Implicit columns the compiler always adds
    RESERVED_FIELD_NAMES: ClassVar[frozenset[str]] = frozenset(
        {"id", "created_at", "updated_at", "deleted_at"}
    )

    @classmethod
    def validate(cls, definition: CollectionDefinition) -> list[ValidationError]:
        """Check every declared field."""
        if not definition.fields:
            return [
                ValidationError(
                    field="fields",
                    message="At least one field is required",
                    type="no_fields",
                )
            ]

        errors: list[ValidationError] = []
        seen: set[str] = set()

        for index, field_def in enumerate(definition.fields):
            path = f"fields[{index}]"

            if field_def.name in seen:
                errors.append(
                    ValidationError(
                        field=f"{path}.name",
                        message=f"Duplicate field name: {field_def.name}",
                        type="duplicate_field",
                    )
                )
            seen.add(field_def.name)

            if not IDENTIFIER_PATTERN.fullmatch(field_def.name):
                errors.append(
                    ValidationError(
                        field=f"{path}.name",
                        message=(
                            f'Field name "{field_def.name}" must start with a letter '
                            "and contain only lowercase letters, numbers, and underscores"
                        ),
                        type="invalid_field_name",
                    )
                )

            if field_def.name in cls.RESERVED_FIELD_NAMES:
                errors.append(
                    ValidationError(
                        field=f"{path}.name",
                        message=(
                            f'Field name "{field_def.name}" is reserved and will be '
                            "auto-generated"
                        ),
                        type="reserved_field_name",
                    )
                )

            errors.extend(cls._validate_kind(field_def, path))

        return errors

    @classmethod
    def _validate_kind(
        cls, field_def: FieldDefinition, path: str
    ) -> list[ValidationError]:
        """Check the parameters a field kind depends on."""
        errors: list[ValidationError] = []

        if field_def.kind == FieldKind.ENUM:
            if not field_def.enum_values:
                errors.append(
                    ValidationError(
                        field=f"{path}.enumValues",
                        message="Enum fields must have at least one value",
                        type="missing_enum_values",
                    )
                )
            elif len(set(field_def.enum_values)) != len(field_def.enum_values):
                errors.append(
                    ValidationError(
                        field=f"{path}.enumValues",
                        message="Enum values must be unique",
                        type="duplicate_enum_value",
                    )
                )

        elif field_def.kind == FieldKind.RELATION:
            if field_def.relation is None:
                errors.append(
                    ValidationError(
                        field=f"{path}.relation",
                        message="Relation fields must have a relation configuration",
                        type="missing_relation_config",
                    )
                )
            elif not field_def.relation.target_collection:
                errors.append(
                    ValidationError(
                        field=f"{path}.relation.targetCollection",
                        message="Relation must specify targetCollection",
                        type="missing_relation_target",
                    )
                )
            elif not COLLECTION_NAME_PATTERN.fullmatch(field_def.relation.target_collection):
                errors.append(
                    ValidationError(
                        field=f"{path}.relation.targetCollection",
                        message=(
                            f'Relation target "{field_def.relation.target_collection}" '
                            "must be lowercase with underscores only"
                        ),
                        type="invalid_relation_target",
                    )
                )

            fk_name = field_def.relation.foreign_key_name if field_def.relation else None
            if fk_name is not None and not IDENTIFIER_PATTERN.fullmatch(fk_name):
                errors.append(
                    ValidationError(
                        field=f"{path}.relation.foreignKeyName",
                        message=(
                            f'Foreign key name "{fk_name}" must start with a letter or '
                            "underscore and contain only lowercase letters, digits "
                            "and underscores"
                        ),
                        type="invalid_foreign_key_name",
                    )
                )

        elif field_def.kind == FieldKind.DECIMAL:
            if field_def.scale is None or field_def.scale < 0:
                errors.append(
                    ValidationError(
                        field=f"{path}.scale",
                        message="Decimal fields must specify a non-negative scale",
                        type="invalid_decimal_scale",
                    )
                )
            elif field_def.precision is not None and (
                field_def.precision < 1 or field_def.precision < field_def.scale
            ):
                errors.append(
                    ValidationError(
                        field=f"{path}.precision",
                        message="Decimal precision must be positive and not less than scale",
                        type="invalid_decimal_precision",
                    )
                )

        elif field_def.kind == FieldKind.TEXT:
            if field_def.max_length is not None and field_def.max_length < 1:
                errors.append(
                    ValidationError(
                        field=f"{path}.maxLength",
                        message="Text max length must be a positive integer",
                        type="invalid_max_length",
                    )
                )

        return errors


class IndexRules:
    """Index rules: naming, uniqueness and field references."""

    @classmethod
    def validate(cls, definition: CollectionDefinition) -> list[ValidationError]:
        """Check every declared index against the field list."""
        errors: list[ValidationError] = []
        field_names = set(definition.field_names)
        seen: set[str] = set()

        for i, index_def in enumerate(definition.indexes):
            path = f"indexes[{i}]"

            if not index_def.fields:
                errors.append(
                    ValidationError(
                        field=f"{path}.fields",
                        message="Index must reference at least one field",
                        type="empty_index",
                    )
                )

            for field_name in index_def.fields:
                if field_name not in field_names:
                    errors.append(
                        ValidationError(
                            field=f"{path}.fields",
                            message=f"Index references non-existent field: {field_name}",
                            type="unknown_index_field",
                        )
                    )

            if not index_def.name or not IDENTIFIER_PATTERN.fullmatch(index_def.name):
                errors.append(
                    ValidationError(
                        field=f"{path}.name",
                        message="Index name must be lowercase with underscores",
                        type="invalid_index_name",
                    )
                )
            elif index_def.name in seen:
                errors.append(
                    ValidationError(
                        field=f"{path}.name",
                        message=f"Duplicate index name: {index_def.name}",
                        type="duplicate_index",
                    )
                )
            seen.add(index_def.name)

        return errors
