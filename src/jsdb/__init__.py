"""
JSDB - Just a Simple DataBase

An in-memory, hierarchical key-value store: an Environment holds named
Databases, a Database holds named Tables, a Table holds Rows under unsigned
32-bit primary keys, and a Row holds named columns of one payload type.

    from jsdb import Environment, Database, Table, Row

    env: Environment[str] = Environment.new()
    env.add_database("d1", Database.create())
    env["d1"].add_table("t1", Table.create())
    env["d1"]["t1"].add_row(1, Row.from_mapping({"name": "hello"}))

Data lives in memory only and is never persisted.
"""

__version__ = "0.1.0"
__author__ = "JSDB contributors"

from jsdb.domain.entities import Database, Environment, Row, Table
from jsdb.domain.errors import (
    DatabaseNotFoundError,
    JSDBError,
    LockTimeoutError,
    NotFoundError,
    RowNotFoundError,
    TableNotFoundError,
)
from jsdb.domain.value_objects import MAX_PRIMARY_KEY, PrimaryKey
from jsdb.application import Store, bootstrap

__all__ = [
    "Environment",
    "Database",
    "Table",
    "Row",
    "PrimaryKey",
    "MAX_PRIMARY_KEY",
    "Store",
    "bootstrap",
    "JSDBError",
    "NotFoundError",
    "DatabaseNotFoundError",
    "TableNotFoundError",
    "RowNotFoundError",
    "LockTimeoutError",
]
