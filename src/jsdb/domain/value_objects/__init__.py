"""Value objects for the container hierarchy.

Value objects are immutable types that represent domain concepts.

Exports:
    Identifiers:
        - PrimaryKey: Unsigned 32-bit row key
        - DatabaseName, TableName, ColumnName: Typed names
        - MIN_PRIMARY_KEY, MAX_PRIMARY_KEY: Key bounds
        - primary_key, validate_name: Boundary validators
"""

from jsdb.domain.value_objects.identifiers import (
    MAX_PRIMARY_KEY,
    MIN_PRIMARY_KEY,
    PRIMARY_KEY_SIZE,
    ColumnName,
    DatabaseName,
    PrimaryKey,
    TableName,
    primary_key,
    validate_name,
)

__all__ = [
    "PrimaryKey",
    "DatabaseName",
    "TableName",
    "ColumnName",
    "MIN_PRIMARY_KEY",
    "MAX_PRIMARY_KEY",
    "PRIMARY_KEY_SIZE",
    "primary_key",
    "validate_name",
]
