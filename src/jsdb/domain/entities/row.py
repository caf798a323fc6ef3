"""Row entity: the leaf of the hierarchy, holding named column values.

A Row is a mapping from column name to a value of the payload type. It is
stored in a Table under a primary key; the key lives in the Table, not in
the Row, so the same Row shape can be built before its key is known.

Column writes follow the insert-or-replace contract used at every level:
setting an existing column discards the previous value, deleting an absent
column does nothing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from jsdb.domain.entities.container import Container, ValueT
from jsdb.domain.value_objects import ColumnName, validate_name


@dataclass
class Row(Container[ColumnName, ValueT]):
    """A set of named columns sharing one primary key within a table.

    Type Parameters:
        ValueT: Payload type stored in each column

    Example:
        >>> row: Row[str] = Row.create()
        >>> row.set_column("name", "hello")
        >>> row.get("name")
        'hello'
        >>> row.delete_column("missing")
        >>> len(row)
        1
    """

    columns: dict[ColumnName, ValueT] = field(default_factory=dict)

    @property
    def _children(self) -> dict[ColumnName, ValueT]:
        return self.columns

    @classmethod
    def create(cls) -> Row[ValueT]:
        """Create a row with no columns."""
        return cls()

    @classmethod
    def from_mapping(cls, columns: Mapping[str, ValueT]) -> Row[ValueT]:
        """Create a row populated from a name -> value mapping.

        The mapping is copied; later changes to it do not reach the row.
        """
        row: Row[ValueT] = cls()
        for name, value in columns.items():
            row.set_column(name, value)
        return row

    def set_column(self, name: str, value: ValueT) -> None:
        """Insert or replace the column called name.

        Any previous value under that name is discarded.
        """
        self._insert(ColumnName(validate_name(name, "column name")), value)

    def delete_column(self, name: str) -> None:
        """Remove the column called name. No-op if it does not exist."""
        self._remove(ColumnName(validate_name(name, "column name")))
