"""Tests for the DDL compiler.

Covers the CREATE script for brand-new collections and the ALTER script
compiled from a diff, with particular attention to statement order.
"""

import pytest

from colschema.core.schema import (
    CollectionDefinition,
    FieldDefinition,
    FieldKind,
    IndexDefinition,
    RelationConfig,
)
from colschema.migrations.detector import diff_schemas
from colschema.sql.compiler import (
    NO_CHANGES_COMMENT,
    DDLCompiler,
    compile_alter_table,
    compile_create_table,
)
from colschema.sql.statements import AlterPhase, CreatePhase


def make_definition(*fields, indexes=(), name="articles"):
    """Build a definition with the given fields."""
    return CollectionDefinition(
        name=name,
        api_name=name,
        display_name=name.title(),
        fields=fields,
        indexes=indexes,
    )


def text(name, **kwargs):
    return FieldDefinition(name=name, kind=FieldKind.TEXT, **kwargs)


def status_enum(*values, name="status"):
    return FieldDefinition(name=name, kind=FieldKind.ENUM, enum_values=values)


def alter(old, new, table="articles"):
    """Compile the ALTER script between two definitions, split into lines."""
    return compile_alter_table(table, diff_schemas(old, new)).splitlines()


@pytest.fixture
def compiler():
    """Create compiler instance."""
    return DDLCompiler()


@pytest.fixture
def articles():
    """A definition exercising enums, relations, decimals and indexes."""
    return make_definition(
        text("title", required=True, max_length=200),
        FieldDefinition(
            name="status",
            kind=FieldKind.ENUM,
            enum_values=("draft", "published"),
            default_value="draft",
        ),
        FieldDefinition(
            name="author",
            kind=FieldKind.RELATION,
            relation=RelationConfig(target_collection="authors", cascade_delete=True),
        ),
        FieldDefinition(name="price", kind=FieldKind.DECIMAL, precision=8, scale=2),
        FieldDefinition(
            name="published_at", kind=FieldKind.DATETIME, default_value="now"
        ),
        indexes=(IndexDefinition(name="idx_articles_title", fields=("title",), unique=True),),
    )


class TestCreateTable:
    """Test the full CREATE script."""

    def test_full_create_script(self, articles):
        """Test types, table, foreign keys and indexes in that order."""
        assert compile_create_table(articles) == (
            "CREATE TYPE status_enum AS ENUM ('draft', 'published');\n"
            "\n"
            "CREATE TABLE IF NOT EXISTS articles (\n"
            "  id SERIAL PRIMARY KEY,\n"
            "  title VARCHAR(200) NOT NULL,\n"
            "  status status_enum DEFAULT 'draft',\n"
            "  author INTEGER,\n"
            "  price NUMERIC(8, 2),\n"
            "  published_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),\n"
            "  created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),\n"
            "  updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()\n"
            ");\n"
            "\n"
            "ALTER TABLE articles ADD CONSTRAINT fk_articles_author FOREIGN KEY (author) "
            "REFERENCES authors(id) ON DELETE CASCADE;\n"
            "\n"
            "CREATE UNIQUE INDEX idx_articles_title ON articles(title);"
        )

    def test_plain_table_has_no_leading_blank_line(self):
        """Test a definition without enums, relations or indexes."""
        sql = compile_create_table(make_definition(text("title")))

        assert sql.startswith("CREATE TABLE IF NOT EXISTS articles (\n  id SERIAL PRIMARY KEY,")
        assert sql.endswith(");")

    def test_statement_phases(self, compiler, articles):
        """Test the structured form of the CREATE script."""
        script = compiler.build_create_table(articles)

        assert [type(s).__name__ for s in script.phase(CreatePhase.TYPES)] == [
            "CreateEnumType"
        ]
        assert [type(s).__name__ for s in script.phase(CreatePhase.TABLE)] == [
            "CreateTable"
        ]
        assert len(script.phase(CreatePhase.FOREIGN_KEYS)) == 1
        assert len(script.phase(CreatePhase.INDEXES)) == 1

    def test_restrict_and_custom_foreign_key_name(self):
        """Test ON DELETE RESTRICT and an explicit constraint name."""
        definition = make_definition(
            FieldDefinition(
                name="owner",
                kind=FieldKind.RELATION,
                relation=RelationConfig(
                    target_collection="people", foreign_key_name="owner_fk"
                ),
            )
        )

        assert (
            "ALTER TABLE articles ADD CONSTRAINT owner_fk FOREIGN KEY (owner) "
            "REFERENCES people(id) ON DELETE RESTRICT;"
        ) in compile_create_table(definition)

    def test_index_columns_are_snake_case(self):
        """Test composite index column order and naming."""
        definition = make_definition(
            text("title"),
            text("slug"),
            indexes=(IndexDefinition(name="idx_slug_title", fields=("slug", "title")),),
        )

        assert compile_create_table(definition).endswith(
            "CREATE INDEX idx_slug_title ON articles(slug, title);"
        )

    def test_string_defaults_are_escaped(self):
        """Test quote doubling in CREATE TABLE defaults."""
        definition = make_definition(text("motto", default_value="it's fine"))

        assert "  motto VARCHAR(255) DEFAULT 'it''s fine'," in compile_create_table(definition)


class TestAlterTableBasics:
    """Test no-op diffs and end-to-end examples."""

    def test_no_changes(self, articles):
        """Test the no-op comment for an unchanged definition."""
        assert compile_alter_table("articles", diff_schemas(articles, articles)) == (
            NO_CHANGES_COMMENT
        )
        assert NO_CHANGES_COMMENT == "-- No schema changes detected"

    def test_max_length_reduction(self):
        """Test the VARCHAR shrink example end to end."""
        old = make_definition(text("title", max_length=255))
        new = make_definition(text("title", max_length=50))

        assert alter(old, new) == [
            "ALTER TABLE articles ALTER COLUMN title TYPE VARCHAR(50) USING title::VARCHAR(50);"
        ]

    def test_type_change(self):
        """Test a kind change with a best-effort cast."""
        old = make_definition(text("views"))
        new = make_definition(FieldDefinition(name="views", kind=FieldKind.INTEGER))

        assert alter(old, new) == [
            "ALTER TABLE articles ALTER COLUMN views TYPE INTEGER USING views::INTEGER;"
        ]

    def test_precision_change(self):
        """Test that precision and scale changes re-type the column."""
        old = make_definition(
            FieldDefinition(name="price", kind=FieldKind.DECIMAL, precision=8, scale=2)
        )
        new = make_definition(
            FieldDefinition(name="price", kind=FieldKind.DECIMAL, precision=12, scale=4)
        )

        assert alter(old, new) == [
            "ALTER TABLE articles ALTER COLUMN price TYPE NUMERIC(12, 4) "
            "USING price::NUMERIC(12, 4);"
        ]

    def test_validation_change_emits_nothing(self):
        """Test that app-level validation changes produce no DDL."""
        old = make_definition(FieldDefinition(name="views", kind=FieldKind.INTEGER))
        new = make_definition(
            FieldDefinition.model_validate(
                {"name": "views", "kind": "integer", "validation": {"min": 0}}
            )
        )

        assert alter(old, new) == []

    def test_uses_given_table_name(self):
        """Test that the physical table name comes from the caller."""
        old = make_definition(text("title"))
        new = make_definition(text("title"), text("summary"))

        assert alter(old, new, table="cms_articles") == [
            "ALTER TABLE cms_articles ADD COLUMN summary VARCHAR(255);"
        ]


class TestAlterTableOrdering:
    """Test the dependency order of ALTER statements."""

    def test_rename_precedes_additions_and_removals(self):
        """Test renames, then additions, then removals."""
        old = make_definition(
            text("headline", required=True),
            FieldDefinition(name="legacy_flag", kind=FieldKind.BOOLEAN),
        )
        new = make_definition(
            text("title", required=True),
            FieldDefinition(name="published_on", kind=FieldKind.DATE),
        )

        assert alter(old, new) == [
            "ALTER TABLE articles RENAME COLUMN headline TO title;",
            "ALTER TABLE articles ADD COLUMN published_on DATE;",
            "ALTER TABLE articles DROP COLUMN legacy_flag CASCADE;",
        ]

    def test_full_phase_order(self, compiler):
        """Test every phase appearing in one diff."""
        old = make_definition(
            text("headline"),
            text("body"),
            FieldDefinition(name="views", kind=FieldKind.INTEGER),
            FieldDefinition(name="obsolete", kind=FieldKind.JSON),
            indexes=(
                IndexDefinition(name="idx_old", fields=("body",)),
                IndexDefinition(name="idx_views", fields=("views",)),
            ),
        )
        new = make_definition(
            text("title"),
            text("body", required=True),
            FieldDefinition(name="views", kind=FieldKind.INTEGER),
            FieldDefinition(name="score", kind=FieldKind.DECIMAL, scale=1),
            indexes=(
                IndexDefinition(name="idx_views", fields=("views",), unique=True),
                IndexDefinition(name="idx_new", fields=("title",)),
            ),
        )

        script = compiler.build_alter_table("articles", diff_schemas(old, new))
        kinds = [type(s).__name__ for s in script.statements]

        assert kinds == [
            "RenameColumn",
            "AddColumn",
            "DropColumn",
            "AlterColumnNullability",
            "DropIndex",
            "DropIndex",
            "CreateIndex",
            "CreateIndex",
        ]
        assert [s.name for s in script.phase(AlterPhase.INDEX_MODIFICATIONS)] == [
            "idx_views",
            "idx_views",
        ]
        assert script.phase(AlterPhase.INDEX_REMOVALS)[0].name == "idx_old"
        assert script.phase(AlterPhase.INDEX_ADDITIONS)[0].name == "idx_new"

    def test_index_modification_is_drop_then_create(self):
        """Test that indexes are recreated rather than altered."""
        old = make_definition(
            text("title"), text("slug"),
            indexes=(IndexDefinition(name="idx_lookup", fields=("title",)),),
        )
        new = make_definition(
            text("title"), text("slug"),
            indexes=(IndexDefinition(name="idx_lookup", fields=("slug", "title")),),
        )

        assert alter(old, new) == [
            "DROP INDEX IF EXISTS idx_lookup;",
            "CREATE INDEX idx_lookup ON articles(slug, title);",
        ]


class TestAlterTableEnums:
    """Test the enum type lifecycle in ALTER scripts."""

    def test_added_enum_creates_type_just_before_column(self):
        """Test CREATE TYPE immediately preceding its ADD COLUMN."""
        old = make_definition(text("title"))
        new = make_definition(
            text("title"),
            FieldDefinition(name="summary", kind=FieldKind.LONGTEXT),
            status_enum("draft", "live"),
        )

        assert alter(old, new) == [
            "ALTER TABLE articles ADD COLUMN summary TEXT;",
            "CREATE TYPE status_enum AS ENUM ('draft', 'live');",
            "ALTER TABLE articles ADD COLUMN status status_enum;",
        ]

    def test_removed_enum_drops_column_then_type(self):
        """Test DROP COLUMN followed by DROP TYPE."""
        old = make_definition(text("title"), status_enum("draft", "live"))
        new = make_definition(text("title"))

        assert alter(old, new) == [
            "ALTER TABLE articles DROP COLUMN status CASCADE;",
            "DROP TYPE IF EXISTS status_enum;",
        ]

    def test_appended_enum_values_use_add_value(self):
        """Test that appending values alters the type in place."""
        old = make_definition(status_enum("draft", "live"))
        new = make_definition(status_enum("draft", "live", "archived", "deleted"))

        assert alter(old, new) == [
            "ALTER TYPE status_enum ADD VALUE IF NOT EXISTS 'archived';",
            "ALTER TYPE status_enum ADD VALUE IF NOT EXISTS 'deleted';",
        ]

    def test_removed_enum_values_recreate_the_type(self):
        """Test rename, create, re-type and drop when values are removed."""
        old = make_definition(status_enum("draft", "live", "archived"))
        new = make_definition(status_enum("draft", "live"))

        assert alter(old, new) == [
            "ALTER TYPE status_enum RENAME TO status_enum_old;",
            "CREATE TYPE status_enum AS ENUM ('draft', 'live');",
            "ALTER TABLE articles ALTER COLUMN status TYPE status_enum "
            "USING status::text::status_enum;",
            "DROP TYPE IF EXISTS status_enum_old;",
        ]

    def test_text_to_enum_creates_type_first(self):
        """Test converting a text column to an enum."""
        old = make_definition(text("status"))
        new = make_definition(status_enum("draft", "live"))

        assert alter(old, new) == [
            "CREATE TYPE status_enum AS ENUM ('draft', 'live');",
            "ALTER TABLE articles ALTER COLUMN status TYPE status_enum "
            "USING status::text::status_enum;",
        ]

    def test_enum_to_text_drops_type_after(self):
        """Test converting an enum column back to text."""
        old = make_definition(status_enum("draft", "live"))
        new = make_definition(text("status"))

        assert alter(old, new) == [
            "ALTER TABLE articles ALTER COLUMN status TYPE VARCHAR(255) "
            "USING status::text::VARCHAR(255);",
            "DROP TYPE IF EXISTS status_enum;",
        ]

    def test_recreated_enum_resets_the_column_default(self):
        """Test that the default is dropped before the retype and restored after."""
        old = make_definition(
            FieldDefinition(
                name="status", kind=FieldKind.ENUM, enum_values=("a", "b"), default_value="a"
            )
        )
        new = make_definition(
            FieldDefinition(
                name="status", kind=FieldKind.ENUM, enum_values=("a", "c"), default_value="a"
            )
        )

        assert alter(old, new) == [
            "ALTER TABLE articles ALTER COLUMN status DROP DEFAULT;",
            "ALTER TYPE status_enum RENAME TO status_enum_old;",
            "CREATE TYPE status_enum AS ENUM ('a', 'c');",
            "ALTER TABLE articles ALTER COLUMN status TYPE status_enum "
            "USING status::text::status_enum;",
            "ALTER TABLE articles ALTER COLUMN status SET DEFAULT 'a';",
            "DROP TYPE IF EXISTS status_enum_old;",
        ]

    def test_text_with_default_to_enum_sets_default_once(self):
        """Test a text column with a default converted to an enum."""
        old = make_definition(text("status", default_value="draft"))
        new = make_definition(
            FieldDefinition(
                name="status",
                kind=FieldKind.ENUM,
                enum_values=("draft", "live"),
                default_value="live",
            )
        )

        assert alter(old, new) == [
            "ALTER TABLE articles ALTER COLUMN status DROP DEFAULT;",
            "CREATE TYPE status_enum AS ENUM ('draft', 'live');",
            "ALTER TABLE articles ALTER COLUMN status TYPE status_enum "
            "USING status::text::status_enum;",
            "ALTER TABLE articles ALTER COLUMN status SET DEFAULT 'live';",
        ]

    def test_retype_dropping_the_default_leaves_it_dropped(self):
        """Test that a removed default is not set again after the retype."""
        old = make_definition(
            FieldDefinition(
                name="status", kind=FieldKind.ENUM, enum_values=("a", "b"), default_value="a"
            )
        )
        new = make_definition(text("status"))

        assert alter(old, new) == [
            "ALTER TABLE articles ALTER COLUMN status DROP DEFAULT;",
            "ALTER TABLE articles ALTER COLUMN status TYPE VARCHAR(255) "
            "USING status::text::VARCHAR(255);",
            "DROP TYPE IF EXISTS status_enum;",
        ]

    def test_appended_enum_values_keep_the_default(self):
        """Test that ADD VALUE needs no default reset."""
        old = make_definition(
            FieldDefinition(
                name="status", kind=FieldKind.ENUM, enum_values=("a",), default_value="a"
            )
        )
        new = make_definition(
            FieldDefinition(
                name="status", kind=FieldKind.ENUM, enum_values=("a", "b"), default_value="a"
            )
        )

        assert alter(old, new) == [
            "ALTER TYPE status_enum ADD VALUE IF NOT EXISTS 'b';"
        ]

    def test_renamed_enum_renames_its_type(self):
        """Test that an enum rename keeps the type named after the column."""
        old = make_definition(text("title"), status_enum("a", "b", name="state"))
        new = make_definition(text("title"), status_enum("a", "b", name="phase"))

        assert alter(old, new) == [
            "ALTER TABLE articles RENAME COLUMN state TO phase;",
            "ALTER TYPE state_enum RENAME TO phase_enum;",
        ]


class TestAlterTableConstraints:
    """Test nullability, uniqueness, defaults and foreign keys."""

    def test_required_flip(self):
        """Test SET and DROP NOT NULL."""
        optional = make_definition(text("title"))
        required = make_definition(text("title", required=True))

        assert alter(optional, required) == [
            "ALTER TABLE articles ALTER COLUMN title SET NOT NULL;"
        ]
        assert alter(required, optional) == [
            "ALTER TABLE articles ALTER COLUMN title DROP NOT NULL;"
        ]

    def test_unique_flip(self):
        """Test adding and dropping the named unique constraint."""
        plain = make_definition(text("slug"))
        unique = make_definition(text("slug", unique=True))

        assert alter(plain, unique) == [
            "ALTER TABLE articles ADD CONSTRAINT articles_slug_unique UNIQUE (slug);"
        ]
        assert alter(unique, plain) == [
            "ALTER TABLE articles DROP CONSTRAINT IF EXISTS articles_slug_unique;",
            "ALTER TABLE articles DROP CONSTRAINT IF EXISTS articles_slug_key;",
        ]

    def test_default_changes(self):
        """Test SET DEFAULT with a function and DROP DEFAULT."""
        none = make_definition(FieldDefinition(name="seen_at", kind=FieldKind.DATETIME))
        now = make_definition(
            FieldDefinition(name="seen_at", kind=FieldKind.DATETIME, default_value="NOW")
        )

        assert alter(none, now) == [
            "ALTER TABLE articles ALTER COLUMN seen_at SET DEFAULT NOW();"
        ]
        assert alter(now, none) == [
            "ALTER TABLE articles ALTER COLUMN seen_at DROP DEFAULT;"
        ]

    def test_modification_statements_follow_attribute_order(self):
        """Test type, nullability, uniqueness then default for one column."""
        old = make_definition(text("code", max_length=20))
        new = make_definition(
            text("code", max_length=10, required=True, unique=True, default_value="x")
        )

        assert alter(old, new) == [
            "ALTER TABLE articles ALTER COLUMN code TYPE VARCHAR(10) USING code::VARCHAR(10);",
            "ALTER TABLE articles ALTER COLUMN code SET NOT NULL;",
            "ALTER TABLE articles ADD CONSTRAINT articles_code_unique UNIQUE (code);",
            "ALTER TABLE articles ALTER COLUMN code SET DEFAULT 'x';",
        ]

    def test_added_relation_adds_foreign_key_after_column(self):
        """Test that the FK constraint directly follows its column."""
        old = make_definition(text("title"))
        new = make_definition(
            text("title"),
            FieldDefinition(
                name="author",
                kind=FieldKind.RELATION,
                required=True,
                relation=RelationConfig(target_collection="authors"),
            ),
            FieldDefinition(name="tags", kind=FieldKind.JSON),
        )

        assert alter(old, new) == [
            "ALTER TABLE articles ADD COLUMN author INTEGER NOT NULL;",
            "ALTER TABLE articles ADD CONSTRAINT fk_articles_author FOREIGN KEY (author) "
            "REFERENCES authors(id) ON DELETE RESTRICT;",
            "ALTER TABLE articles ADD COLUMN tags JSONB;",
        ]

    def test_added_column_with_default(self):
        """Test that ADD COLUMN carries constraints and default."""
        old = make_definition(text("title"))
        new = make_definition(
            text("title"),
            FieldDefinition(
                name="featured", kind=FieldKind.BOOLEAN, required=True, default_value=False
            ),
        )

        assert alter(old, new) == [
            "ALTER TABLE articles ADD COLUMN featured BOOLEAN NOT NULL DEFAULT false;"
        ]
