"""Rendering of field default values as SQL expressions.

A small closed set of SQL functions may be used as defaults by name; every
other value is rendered as a literal.
"""

from enum import Enum
import json
from typing import Any


class SqlFunction(str, Enum):
    """SQL functions accepted as default values, matched case-insensitively."""

    NOW = "NOW"
    CURRENT_DATE = "CURRENT_DATE"
    CURRENT_TIMESTAMP = "CURRENT_TIMESTAMP"
    CURRENT_TIME = "CURRENT_TIME"

    @property
    def sql(self) -> str:
        """SQL fragment emitted for this function."""
        return _FUNCTION_SQL[self]

    @classmethod
    def lookup(cls, value: str) -> "SqlFunction | None":
        """Return the function named by ``value``, ignoring case."""
        try:
            return cls(value.upper())
        except ValueError:
            return None


_FUNCTION_SQL: dict[SqlFunction, str] = {
    SqlFunction.NOW: "NOW()",
    SqlFunction.CURRENT_DATE: "CURRENT_DATE",
    SqlFunction.CURRENT_TIMESTAMP: "CURRENT_TIMESTAMP",
    SqlFunction.CURRENT_TIME: "CURRENT_TIME",
}


def quote_literal(value: str) -> str:
    """Quote a string as a SQL literal, doubling embedded single quotes."""
    return "'" + value.replace("'", "''") + "'"


def render_default(value: Any) -> str:
    """Render a default value as a SQL expression.

    Args:
        value: The field's default value (never ``None``)

    Returns:
        The expression to place after ``DEFAULT``
    """
    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, int | float):
        return str(value)

    if isinstance(value, str):
        function = SqlFunction.lookup(value)
        if function is not None:
            return function.sql
        return quote_literal(value)

    # Lists and mappings are stored as JSON text
    return quote_literal(json.dumps(value))
