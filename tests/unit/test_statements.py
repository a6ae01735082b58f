"""Tests for DDL statement records and phase ordering."""

from colschema.sql.statements import (
    AddColumn,
    AddEnumValue,
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
    Script,
)


class TestStatementRendering:
    """Test the SQL form of individual statements."""

    def test_column_spec(self):
        """Test column constraint order."""
        column = ColumnSpec(
            name="slug", type="VARCHAR(80)", not_null=True, unique=True, default="'x'"
        )

        assert column.render() == "slug VARCHAR(80) NOT NULL UNIQUE DEFAULT 'x'"
        assert ColumnSpec(name="id", type="SERIAL", primary_key=True).render() == (
            "id SERIAL PRIMARY KEY"
        )

    def test_create_table(self):
        """Test the multi-line CREATE TABLE layout."""
        statement = CreateTable(
            table="notes",
            columns=(
                ColumnSpec(name="id", type="SERIAL", primary_key=True),
                ColumnSpec(name="body", type="TEXT"),
            ),
        )

        assert statement.render() == (
            "CREATE TABLE IF NOT EXISTS notes (\n  id SERIAL PRIMARY KEY,\n  body TEXT\n);"
        )

    def test_enum_statements_quote_values(self):
        """Test enum value quoting."""
        assert CreateEnumType(type_name="mood_enum", values=("ok", "can't")).render() == (
            "CREATE TYPE mood_enum AS ENUM ('ok', 'can''t');"
        )
        assert AddEnumValue(type_name="mood_enum", value="meh").render() == (
            "ALTER TYPE mood_enum ADD VALUE IF NOT EXISTS 'meh';"
        )
        assert DropType(type_name="mood_enum").render() == "DROP TYPE IF EXISTS mood_enum;"

    def test_column_alterations(self):
        """Test ALTER TABLE statement forms."""
        assert RenameColumn(table="t", column="a", new_name="b").render() == (
            "ALTER TABLE t RENAME COLUMN a TO b;"
        )
        assert AddColumn(table="t", column=ColumnSpec(name="c", type="DATE")).render() == (
            "ALTER TABLE t ADD COLUMN c DATE;"
        )
        assert DropColumn(table="t", column="c").render() == (
            "ALTER TABLE t DROP COLUMN c CASCADE;"
        )
        assert AlterColumnType(
            table="t", column="c", new_type="INTEGER", using="c::INTEGER"
        ).render() == "ALTER TABLE t ALTER COLUMN c TYPE INTEGER USING c::INTEGER;"
        assert AlterColumnNullability(table="t", column="c", not_null=True).render() == (
            "ALTER TABLE t ALTER COLUMN c SET NOT NULL;"
        )
        assert AlterColumnNullability(table="t", column="c", not_null=False).render() == (
            "ALTER TABLE t ALTER COLUMN c DROP NOT NULL;"
        )
        assert AlterColumnDefault(table="t", column="c", expression="0").render() == (
            "ALTER TABLE t ALTER COLUMN c SET DEFAULT 0;"
        )
        assert AlterColumnDefault(table="t", column="c", expression=None).render() == (
            "ALTER TABLE t ALTER COLUMN c DROP DEFAULT;"
        )
        assert DropConstraint(table="t", constraint="t_c_unique").render() == (
            "ALTER TABLE t DROP CONSTRAINT IF EXISTS t_c_unique;"
        )

    def test_index_statements(self):
        """Test index creation and removal."""
        assert CreateIndex(name="idx_ab", table="t", columns=("a", "b")).render() == (
            "CREATE INDEX idx_ab ON t(a, b);"
        )
        assert CreateIndex(
            name="idx_a", table="t", columns=("a",), unique=True
        ).render() == "CREATE UNIQUE INDEX idx_a ON t(a);"
        assert DropIndex(name="idx_a").render() == "DROP INDEX IF EXISTS idx_a;"


class TestScript:
    """Test phase ordering of a script."""

    def test_statements_are_ordered_by_phase(self):
        """Test that phases win over insertion order."""
        script = Script()
        script.add(AlterPhase.INDEX_ADDITIONS, CreateIndex(name="i", table="t", columns=("a",)))
        script.add(AlterPhase.REMOVALS, DropColumn(table="t", column="old"))
        script.add(AlterPhase.RENAMES, RenameColumn(table="t", column="a", new_name="b"))

        assert [type(s).__name__ for s in script.statements] == [
            "RenameColumn",
            "DropColumn",
            "CreateIndex",
        ]

    def test_insertion_order_is_kept_within_a_phase(self):
        """Test that sorting by phase is stable."""
        script = Script()
        script.add(AlterPhase.ADDITIONS, DropIndex(name="first"))
        script.add(AlterPhase.RENAMES, DropIndex(name="zero"))
        script.add(AlterPhase.ADDITIONS, DropIndex(name="second"))

        assert script.render() == (
            "DROP INDEX IF EXISTS zero;\n"
            "DROP INDEX IF EXISTS first;\n"
            "DROP INDEX IF EXISTS second;"
        )
        assert [s.name for s in script.phase(AlterPhase.ADDITIONS)] == ["first", "second"]
        assert len(script) == 3

    def test_render_grouped_separates_phases(self):
        """Test blank lines between phases and none inside a phase."""
        script = Script()
        script.add(CreatePhase.INDEXES, DropIndex(name="b"), DropIndex(name="c"))
        script.add(CreatePhase.TYPES, DropType(type_name="a"))

        assert script.render_grouped() == (
            "DROP TYPE IF EXISTS a;\n\nDROP INDEX IF EXISTS b;\nDROP INDEX IF EXISTS c;"
        )

    def test_empty_script(self):
        """Test rendering with no statements."""
        assert Script().render() == ""
        assert Script().render_grouped() == ""
