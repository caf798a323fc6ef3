"""Table entity: rows indexed by an unsigned 32-bit primary key.

There is no auto-increment, no secondary index and no ordering guarantee
over rows. Callers choose keys; adding a row under a key that is already
taken replaces the old row and everything in it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from jsdb.domain.entities.container import Container, ValueT
from jsdb.domain.entities.row import Row
from jsdb.domain.value_objects import PrimaryKey, primary_key


@dataclass
class Table(Container[PrimaryKey, Row[ValueT]]):
    """A named collection of rows within a database.

    The table's name is held by the owning Database.

    Example:
        >>> table: Table[str] = Table.create()
        >>> table.add_row(1, Row.from_mapping({"name": "hello"}))
        >>> table.get(1).get("name")
        'hello'
        >>> table.add_row(1, Row.create())
        >>> len(table), table[1].is_empty()
        (1, True)
    """

    rows: dict[PrimaryKey, Row[ValueT]] = field(default_factory=dict)

    @property
    def _children(self) -> dict[PrimaryKey, Row[ValueT]]:
        return self.rows

    @classmethod
    def create(cls) -> Table[ValueT]:
        """Create a table with no rows."""
        return cls()

    def add_row(self, key: int, row: Row[ValueT]) -> None:
        """Insert or replace the row stored under key.

        The replaced row is dropped whole; columns are never merged.

        Raises:
            TypeError: If key is not an int or row is not a Row
            ValueError: If key does not fit in an unsigned 32-bit integer
        """
        if not isinstance(row, Row):
            raise TypeError(f"expected Row, got {type(row).__name__}")
        self._insert(primary_key(key), row)

    def delete_row(self, key: int) -> None:
        """Remove the row stored under key. No-op if there is none."""
        self._remove(primary_key(key))
