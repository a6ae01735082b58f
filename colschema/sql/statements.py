"""Typed DDL statement records and the script that orders them.

The compiler never concatenates SQL directly. It builds statement records,
tags each with the phase it belongs to, and renders the script at the end.
Statement order is therefore decided by phase, not by the order in which the
compiler happened to visit the diff.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum

from .defaults import quote_literal


class CreatePhase(IntEnum):
    """Statement phases of a full CREATE script, in execution order."""

    TYPES = 1
    TABLE = 2
    FOREIGN_KEYS = 3
    INDEXES = 4


class AlterPhase(IntEnum):
    """Statement phases of an ALTER script, in execution order.

    Renames come first so every later statement can use final column names.
    """

    RENAMES = 1
    ADDITIONS = 2
    REMOVALS = 3
    MODIFICATIONS = 4
    INDEX_REMOVALS = 5
    INDEX_MODIFICATIONS = 6
    INDEX_ADDITIONS = 7


class Statement(ABC):
    """A single DDL statement."""

    @abstractmethod
    def render(self) -> str:
        """Render the statement as SQL text."""


@dataclass(frozen=True)
class ColumnSpec:
    """A column definition as it appears in CREATE TABLE or ADD COLUMN."""

    name: str
    type: str
    not_null: bool = False
    unique: bool = False
    default: str | None = None
    primary_key: bool = False

    def render(self) -> str:
        parts = [self.name, self.type]
        if self.primary_key:
            parts.append("PRIMARY KEY")
        if self.not_null:
            parts.append("NOT NULL")
        if self.unique:
            parts.append("UNIQUE")
        if self.default is not None:
            parts.append(f"DEFAULT {self.default}")
        return " ".join(parts)


@dataclass(frozen=True)
class CreateEnumType(Statement):
    type_name: str
    values: tuple[str, ...]

    def render(self) -> str:
        values = ", ".join(quote_literal(value) for value in self.values)
        return f"CREATE TYPE {self.type_name} AS ENUM ({values});"


@dataclass(frozen=True)
class DropType(Statement):
    type_name: str

    def render(self) -> str:
        return f"DROP TYPE IF EXISTS {self.type_name};"


@dataclass(frozen=True)
class RenameType(Statement):
    type_name: str
    new_name: str

    def render(self) -> str:
        return f"ALTER TYPE {self.type_name} RENAME TO {self.new_name};"


@dataclass(frozen=True)
class AddEnumValue(Statement):
    type_name: str
    value: str

    def render(self) -> str:
        return (
            f"ALTER TYPE {self.type_name} ADD VALUE IF NOT EXISTS "
            f"{quote_literal(self.value)};"
        )


@dataclass(frozen=True)
class CreateTable(Statement):
    table: str
    columns: tuple[ColumnSpec, ...]

    def render(self) -> str:
        lines = ",\n".join(f"  {column.render()}" for column in self.columns)
        return f"CREATE TABLE IF NOT EXISTS {self.table} (\n{lines}\n);"


@dataclass(frozen=True)
class RenameColumn(Statement):
    table: str
    column: str
    new_name: str

    def render(self) -> str:
        return f"ALTER TABLE {self.table} RENAME COLUMN {self.column} TO {self.new_name};"


@dataclass(frozen=True)
class AddColumn(Statement):
    table: str
    column: ColumnSpec

    def render(self) -> str:
        return f"ALTER TABLE {self.table} ADD COLUMN {self.column.render()};"


@dataclass(frozen=True)
class DropColumn(Statement):
    table: str
    column: str

    def render(self) -> str:
        return f"ALTER TABLE {self.table} DROP COLUMN {self.column} CASCADE;"


@dataclass(frozen=True)
class AlterColumnType(Statement):
    table: str
    column: str
    new_type: str
    using: str

    def render(self) -> str:
        return (
            f"ALTER TABLE {self.table} ALTER COLUMN {self.column} "
            f"TYPE {self.new_type} USING {self.using};"
        )


@dataclass(frozen=True)
class AlterColumnNullability(Statement):
    table: str
    column: str
    not_null: bool

    def render(self) -> str:
        action = "SET NOT NULL" if self.not_null else "DROP NOT NULL"
        return f"ALTER TABLE {self.table} ALTER COLUMN {self.column} {action};"


@dataclass(frozen=True)
class AlterColumnDefault(Statement):
    """SET DEFAULT when ``expression`` is given, otherwise DROP DEFAULT."""

    table: str
    column: str
    expression: str | None

    def render(self) -> str:
        if self.expression is None:
            return f"ALTER TABLE {self.table} ALTER COLUMN {self.column} DROP DEFAULT;"
        return (
            f"ALTER TABLE {self.table} ALTER COLUMN {self.column} "
            f"SET DEFAULT {self.expression};"
        )


@dataclass(frozen=True)
class AddForeignKey(Statement):
    table: str
    constraint: str
    column: str
    target_table: str
    on_delete: str

    def render(self) -> str:
        return (
            f"ALTER TABLE {self.table} ADD CONSTRAINT {self.constraint} "
            f"FOREIGN KEY ({self.column}) REFERENCES {self.target_table}(id) "
            f"ON DELETE {self.on_delete};"
        )


@dataclass(frozen=True)
class AddUniqueConstraint(Statement):
    table: str
    constraint: str
    column: str

    def render(self) -> str:
        return (
            f"ALTER TABLE {self.table} ADD CONSTRAINT {self.constraint} "
            f"UNIQUE ({self.column});"
        )


@dataclass(frozen=True)
class DropConstraint(Statement):
    table: str
    constraint: str

    def render(self) -> str:
        return f"ALTER TABLE {self.table} DROP CONSTRAINT IF EXISTS {self.constraint};"


@dataclass(frozen=True)
class CreateIndex(Statement):
    name: str
    table: str
    columns: tuple[str, ...]
    unique: bool = False

    def render(self) -> str:
        kind = "UNIQUE INDEX" if self.unique else "INDEX"
        return f"CREATE {kind} {self.name} ON {self.table}({', '.join(self.columns)});"


@dataclass(frozen=True)
class DropIndex(Statement):
    name: str

    def render(self) -> str:
        return f"DROP INDEX IF EXISTS {self.name};"


@dataclass
class Script:
    """An ordered collection of statements grouped by phase.

    Statements are kept in insertion order within a phase; phases are
    rendered in ascending order.
    """

    _entries: list[tuple[int, Statement]] = field(default_factory=list)

    def add(self, phase: IntEnum, *statements: Statement) -> None:
        """Append statements to a phase."""
        for statement in statements:
            self._entries.append((int(phase), statement))

    @property
    def statements(self) -> list[Statement]:
        """All statements in execution order."""
        ordered = sorted(self._entries, key=lambda entry: entry[0])
        return [statement for _, statement in ordered]

    def phase(self, phase: IntEnum) -> list[Statement]:
        """Statements belonging to one phase, in insertion order."""
        return [statement for p, statement in self._entries if p == int(phase)]

    def __len__(self) -> int:
        return len(self._entries)

    def render(self) -> str:
        """Render one statement per line."""
        return "\n".join(statement.render() for statement in self.statements)

    def render_grouped(self) -> str:
        """Render statements with a blank line between phases."""
        groups: dict[int, list[str]] = {}
        for statement_phase, statement in sorted(
            self._entries, key=lambda entry: entry[0]
        ):
            groups.setdefault(statement_phase, []).append(statement.render())
        return "\n\n".join("\n".join(lines) for lines in groups.values())
