"""Database entity: tables indexed by name."""

from __future__ import annotations

from dataclasses import dataclass, field

from jsdb.domain.entities.container import Container, ValueT
from jsdb.domain.entities.table import Table
from jsdb.domain.value_objects import TableName, validate_name


@dataclass
class Database(Container[TableName, Table[ValueT]]):
    """A named collection of tables within an environment.

    Adding a table under a name already in use replaces the old table and
    all of its rows.
    """

    tables: dict[TableName, Table[ValueT]] = field(default_factory=dict)

    @property
    def _children(self) -> dict[TableName, Table[ValueT]]:
        return self.tables

    @classmethod
    def create(cls) -> Database[ValueT]:
        """Create a database with no tables."""
        return cls()

    def add_table(self, name: str, table: Table[ValueT]) -> None:
        """Insert or replace the table called name.

        Raises:
            TypeError: If name is not a str or table is not a Table
        """
        if not isinstance(table, Table):
            raise TypeError(f"expected Table, got {type(table).__name__}")
        self._insert(TableName(validate_name(name, "table name")), table)

    def delete_table(self, name: str) -> None:
        """Remove the table called name. No-op if it does not exist."""
        self._remove(TableName(validate_name(name, "table name")))
