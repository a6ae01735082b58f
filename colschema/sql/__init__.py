"""PostgreSQL type mapping, default rendering and DDL statement records.

The compiler lives in ``colschema.sql.compiler``; it depends on the diff
model and is imported from there directly.
"""

from .defaults import SqlFunction, quote_literal, render_default
from .statements import AlterPhase, CreatePhase, Script, Statement
from .types import enum_type_name, physical_type, to_snake_case

__all__ = [
    "AlterPhase",
    "CreatePhase",
    "Script",
    "SqlFunction",
    "Statement",
    "enum_type_name",
    "physical_type",
    "quote_literal",
    "render_default",
    "to_snake_case",
]
