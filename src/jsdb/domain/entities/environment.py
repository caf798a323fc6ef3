"""Environment: the root of the hierarchy and the one object a caller builds.

An Environment holds databases by name. Its type parameter fixes the
payload type for every column of every row beneath it:

    env: Environment[str] = Environment.new()

Everything below is reached by plain lookups:

    env["d1"]["t1"][1]["name"]

There is no independent destroy operation for any level. Removing a
database from the environment releases its tables, their rows and their
columns, because nothing else holds them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from jsdb.domain.entities.container import Container, ValueT
from jsdb.domain.entities.database import Database
from jsdb.domain.value_objects import DatabaseName, validate_name


@dataclass
class Environment(Container[DatabaseName, Database[ValueT]]):
    """Top-level container holding all databases for one logical instance.

    Notes:
        - In-memory only; nothing is persisted.
        - Database names are unique; adding under an existing name replaces.
        - Not thread-safe. Wrap in a Store with thread_safe=True for shared use.
    """

    databases: dict[DatabaseName, Database[ValueT]] = field(default_factory=dict)

    @property
    def _children(self) -> dict[DatabaseName, Database[ValueT]]:
        return self.databases

    @classmethod
    def new(cls) -> Environment[ValueT]:
        """Create an environment with no databases."""
        return cls()

    def add_database(self, name: str, database: Database[ValueT]) -> None:
        """Insert or replace the database called name.

        Raises:
            TypeError: If name is not a str or database is not a Database
        """
        if not isinstance(database, Database):
            raise TypeError(f"expected Database, got {type(database).__name__}")
        self._insert(DatabaseName(validate_name(name, "database name")), database)

    def delete_database(self, name: str) -> None:
        """Remove the database called name. No-op if it does not exist."""
        self._remove(DatabaseName(validate_name(name, "database name")))
