"""DDL compilation for collection definitions and schema diffs.

The compiler turns a full definition into a CREATE script and a SchemaDiff
into an ALTER script. Both are built as phase-tagged statement records (see
``statements``) and rendered at the end, so statement order always follows
PostgreSQL's dependency rules: types before columns, columns before
constraints, constraints before indexes, and the reverse on removal.
"""

from ..core.logging import get_logger
from ..core.schema import (
    CollectionDefinition,
    FieldDefinition,
    FieldKind,
    IndexDefinition,
)
from ..migrations.detector import FieldChange, SchemaDiff
from ..migrations.types import FieldAttribute, TYPE_AFFECTING_ATTRIBUTES
from .defaults import render_default
from .statements import (
    AddColumn,
    AddEnumValue,
    AddForeignKey,
    AddUniqueConstraint,
    AlterColumnDefault,
    AlterColumnNullability,
    AlterColumnType,
    AlterPhase,
    ColumnSpec,
    CreateEnumType,
    CreateIndex,
    CreatePhase,
    CreateTable,
    DropColumn,
    DropConstraint,
    DropIndex,
    DropType,
    RenameColumn,
    RenameType,
    Script,
    Statement,
)
from .types import column_name, enum_type_name, physical_type, to_snake_case

logger = get_logger(__name__)

NO_CHANGES_COMMENT = "-- No schema changes detected"

TIMESTAMP_TYPE = "TIMESTAMP WITH TIME ZONE"

# Implicit columns present on every collection table
ID_COLUMN = ColumnSpec(name="id", type="SERIAL", primary_key=True)
TIMESTAMP_COLUMNS = (
    ColumnSpec(name="created_at", type=TIMESTAMP_TYPE, not_null=True, default="NOW()"),
    ColumnSpec(name="updated_at", type=TIMESTAMP_TYPE, not_null=True, default="NOW()"),
)


def column_spec(field: FieldDefinition) -> ColumnSpec:
    """Column definition for a declared field."""
    return ColumnSpec(
        name=column_name(field),
        type=physical_type(field),
        not_null=field.required,
        unique=field.unique,
        default=render_default(field.default_value) if field.has_default else None,
    )


def unique_constraint_name(table_name: str, column: str) -> str:
    return f"{table_name}_{column}_unique"


class DDLCompiler:
    """Compiles definitions and diffs into PostgreSQL DDL."""

    def build_create_table(self, definition: CollectionDefinition) -> Script:
        """Build the statements that create a collection's table from scratch."""
        table = definition.name
        script = Script()

        for field in definition.fields:
            if field.kind == FieldKind.ENUM and field.enum_values:
                script.add(CreatePhase.TYPES, self._create_enum_type(field))

        columns = (
            ID_COLUMN,
            *(column_spec(field) for field in definition.fields),
            *TIMESTAMP_COLUMNS,
        )
        script.add(CreatePhase.TABLE, CreateTable(table=table, columns=columns))

        for field in definition.fields:
            foreign_key = self._foreign_key(table, field)
            if foreign_key is not None:
                script.add(CreatePhase.FOREIGN_KEYS, foreign_key)

        for index in definition.indexes:
            script.add(CreatePhase.INDEXES, self._create_index(table, index))

        return script

    def compile_create_table(self, definition: CollectionDefinition) -> str:
        """Compile a CREATE script, with a blank line between statement groups."""
        script = self.build_create_table(definition)
        logger.debug(
            "Compiled CREATE TABLE script",
            table=definition.name,
            statements=len(script),
        )
        return script.render_grouped()

    def build_alter_table(self, table_name: str, diff: SchemaDiff) -> Script:
        """Build the statements that migrate a table according to a diff."""
        script = Script()

        for rename in diff.renamed_fields:
            old_column = to_snake_case(rename.old_name)
            new_column = to_snake_case(rename.new_name)
            script.add(
                AlterPhase.RENAMES,
                RenameColumn(table=table_name, column=old_column, new_name=new_column),
            )
            if rename.field.kind == FieldKind.ENUM and old_column != new_column:
                # Keep the enum type named after its column
                script.add(
                    AlterPhase.RENAMES,
                    RenameType(
                        type_name=f"{old_column}_enum",
                        new_name=enum_type_name(rename.field),
                    ),
                )

        for field in diff.added_fields:
            if field.kind == FieldKind.ENUM and field.enum_values:
                script.add(AlterPhase.ADDITIONS, self._create_enum_type(field))
            script.add(
                AlterPhase.ADDITIONS,
                AddColumn(table=table_name, column=column_spec(field)),
            )
            foreign_key = self._foreign_key(table_name, field)
            if foreign_key is not None:
                script.add(AlterPhase.ADDITIONS, foreign_key)

        for field in diff.removed_fields:
            script.add(
                AlterPhase.REMOVALS,
                DropColumn(table=table_name, column=column_name(field)),
            )
            if field.kind == FieldKind.ENUM:
                script.add(AlterPhase.REMOVALS, DropType(type_name=enum_type_name(field)))

        for change in diff.modified_fields:
            script.add(
                AlterPhase.MODIFICATIONS, *self._modify_column(table_name, change)
            )

        for index in diff.removed_indexes:
            script.add(AlterPhase.INDEX_REMOVALS, DropIndex(name=index.name))

        for index_change in diff.modified_indexes:
            script.add(
                AlterPhase.INDEX_MODIFICATIONS,
                DropIndex(name=index_change.old_index.name),
                self._create_index(table_name, index_change.new_index),
            )

        for index in diff.added_indexes:
            script.add(AlterPhase.INDEX_ADDITIONS, self._create_index(table_name, index))

        return script

    def compile_alter_table(self, table_name: str, diff: SchemaDiff) -> str:
        """Compile an ALTER script, one statement per line.

        Returns a no-op SQL comment when the diff has no changes.
        """
        if not diff.has_changes:
            return NO_CHANGES_COMMENT

        script = self.build_alter_table(table_name, diff)
        logger.debug(
            "Compiled ALTER TABLE script",
            table=table_name,
            statements=len(script),
        )
        return script.render()

    def _modify_column(self, table: str, change: FieldChange) -> list[Statement]:
        """Statements for one modified field, in attribute order."""
        old, new = change.old_field, change.new_field
        column = column_name(new)
        statements: list[Statement] = []

        new_type = physical_type(new)
        retype: list[Statement] = []
        if change.has(FieldAttribute.TYPE) or (
            change.has(*TYPE_AFFECTING_ATTRIBUTES) and physical_type(old) != new_type
        ):
            retype = self._retype_column(table, column, old, new, new_type)
        elif (
            change.has(FieldAttribute.ENUM_VALUES)
            and old.kind == FieldKind.ENUM
            and new.kind == FieldKind.ENUM
        ):
            retype = self._change_enum_values(table, column, old, new)

        default_reset = old.has_default and any(
            isinstance(statement, AlterColumnType) for statement in retype
        )
        if default_reset:
            retype = self._reset_default_around(table, column, new, retype)
        statements.extend(retype)

        if change.has(FieldAttribute.REQUIRED):
            statements.append(
                AlterColumnNullability(table=table, column=column, not_null=new.required)
            )

        if change.has(FieldAttribute.UNIQUE):
            constraint = unique_constraint_name(table, column)
            if new.unique:
                statements.append(
                    AddUniqueConstraint(table=table, constraint=constraint, column=column)
                )
            else:
                # Inline UNIQUE columns get PostgreSQL's generated "_key" name
                statements.append(DropConstraint(table=table, constraint=constraint))
                statements.append(
                    DropConstraint(table=table, constraint=f"{table}_{column}_key")
                )

        if change.has(FieldAttribute.DEFAULT_VALUE) and not default_reset:
            expression = render_default(new.default_value) if new.has_default else None
            statements.append(
                AlterColumnDefault(table=table, column=column, expression=expression)
            )

        return statements

    @staticmethod
    def _reset_default_around(
        table: str,
        column: str,
        new: FieldDefinition,
        retype: list[Statement],
    ) -> list[Statement]:
        """Drop the column default before a retype and restore it right after.

        PostgreSQL will not cast an existing default to an enum, and an old
        enum type cannot be dropped while a default still references it.
        """
        statements: list[Statement] = [
            AlterColumnDefault(table=table, column=column, expression=None)
        ]
        for statement in retype:
            statements.append(statement)
            if isinstance(statement, AlterColumnType) and new.has_default:
                statements.append(
                    AlterColumnDefault(
                        table=table,
                        column=column,
                        expression=render_default(new.default_value),
                    )
                )
        return statements

    def _retype_column(
        self,
        table: str,
        column: str,
        old: FieldDefinition,
        new: FieldDefinition,
        new_type: str,
    ) -> list[Statement]:
        """Change a column's physical type with a best-effort cast."""
        statements: list[Statement] = []
        old_is_enum = old.kind == FieldKind.ENUM
        new_is_enum = new.kind == FieldKind.ENUM

        if new_is_enum and not old_is_enum and new.enum_values:
            statements.append(self._create_enum_type(new))

        if old_is_enum != new_is_enum:
            using = f"{column}::text::{new_type}"
        else:
            using = f"{column}::{new_type}"
        statements.append(
            AlterColumnType(table=table, column=column, new_type=new_type, using=using)
        )

        if old_is_enum and not new_is_enum:
            statements.append(DropType(type_name=enum_type_name(old)))

        if old.kind == FieldKind.RELATION and new.kind != FieldKind.RELATION:
            old_fk = self._foreign_key(table, old)
            if old_fk is not None:
                statements.append(DropConstraint(table=table, constraint=old_fk.constraint))
        elif new.kind == FieldKind.RELATION and old.kind != FieldKind.RELATION:
            new_fk = self._foreign_key(table, new)
            if new_fk is not None:
                statements.append(new_fk)

        return statements

    def _change_enum_values(
        self,
        table: str,
        column: str,
        old: FieldDefinition,
        new: FieldDefinition,
    ) -> list[Statement]:
        """Change the value set of an existing enum type.

        Appending values uses ``ADD VALUE``; any other change recreates the
        type and re-types the column through text.
        """
        type_name = enum_type_name(new)
        old_values = tuple(old.enum_values or ())
        new_values = tuple(new.enum_values or ())

        if new_values[: len(old_values)] == old_values:
            return [
                AddEnumValue(type_name=type_name, value=value)
                for value in new_values[len(old_values) :]
            ]

        retired = f"{type_name}_old"
        return [
            RenameType(type_name=type_name, new_name=retired),
            CreateEnumType(type_name=type_name, values=new_values),
            AlterColumnType(
                table=table,
                column=column,
                new_type=type_name,
                using=f"{column}::text::{type_name}",
            ),
            DropType(type_name=retired),
        ]

    @staticmethod
    def _create_enum_type(field: FieldDefinition) -> CreateEnumType:
        return CreateEnumType(
            type_name=enum_type_name(field), values=tuple(field.enum_values or ())
        )

    @staticmethod
    def _foreign_key(table: str, field: FieldDefinition) -> AddForeignKey | None:
        """Foreign key constraint for a relation field, if it has a target."""
        if field.kind != FieldKind.RELATION or field.relation is None:
            return None
        if not field.relation.target_collection:
            return None

        column = column_name(field)
        return AddForeignKey(
            table=table,
            constraint=field.relation.foreign_key_name or f"fk_{table}_{column}",
            column=column,
            target_table=field.relation.target_collection,
            on_delete="CASCADE" if field.relation.cascade_delete else "RESTRICT",
        )

    @staticmethod
    def _create_index(table: str, index: IndexDefinition) -> CreateIndex:
        return CreateIndex(
            name=index.name,
            table=table,
            columns=tuple(to_snake_case(name) for name in index.fields),
            unique=index.unique,
        )


def compile_create_table(definition: CollectionDefinition) -> str:
    """Compile the CREATE script for a brand-new collection."""
    return DDLCompiler().compile_create_table(definition)


def compile_alter_table(table_name: str, diff: SchemaDiff) -> str:
    """Compile the ALTER script that applies a diff to ``table_name``."""
    return DDLCompiler().compile_alter_table(table_name, diff)
