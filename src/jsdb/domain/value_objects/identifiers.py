"""Identifiers and type-safe primitives for the container hierarchy.

Names and primary keys are plain ``str`` and ``int`` at runtime. The
``NewType`` wrappers below give static checkers enough to tell a table name
from a column name, and the validators enforce the constraints the types
cannot: primary keys are unsigned 32-bit integers and names are strings.
"""

from __future__ import annotations

from typing import Any, NewType


# Type-safe identifiers using NewType for zero-cost runtime abstraction

PrimaryKey = NewType("PrimaryKey", int)
"""Row identifier within a table. Unsigned 32-bit, no auto-increment."""

DatabaseName = NewType("DatabaseName", str)
"""Name of a database, unique within an environment."""

TableName = NewType("TableName", str)
"""Name of a table, unique within a database."""

ColumnName = NewType("ColumnName", str)
"""Name of a column, unique within a row."""

MIN_PRIMARY_KEY = PrimaryKey(0)
MAX_PRIMARY_KEY = PrimaryKey(2**32 - 1)

# Size constants
PRIMARY_KEY_SIZE = 4  # bytes, u32


def primary_key(value: Any) -> PrimaryKey:
    """Validate and wrap a primary key.

    Args:
        value: Candidate key

    Returns:
        The key as a PrimaryKey

    Raises:
        TypeError: If value is not an int (bool is rejected too)
        ValueError: If value does not fit in an unsigned 32-bit integer

    Example:
        >>> primary_key(42)
        42
        >>> primary_key(-1)
        Traceback (most recent call last):
        ...
        ValueError: primary key must be in [0, 4294967295], got -1
    """
    # bool is an int subclass but True/False are never meaningful keys
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"primary key must be an int, got {type(value).__name__}")
    if not MIN_PRIMARY_KEY <= value <= MAX_PRIMARY_KEY:
        raise ValueError(
            f"primary key must be in [{MIN_PRIMARY_KEY}, {MAX_PRIMARY_KEY}], got {value}"
        )
    return PrimaryKey(value)


def validate_name(value: Any, kind: str = "name") -> str:
    """Check that a database, table or column name is a string.

    The empty string is a valid name.

    Raises:
        TypeError: If value is not a str
    """
    if not isinstance(value, str):
        raise TypeError(f"{kind} must be a str, got {type(value).__name__}")
    return value
