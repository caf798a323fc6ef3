"""Domain entities: the four nested containers.

Exports:
    - Container: Shared read-only mapping surface
    - ValueT: Payload type variable threaded through every level
    - Row: Column name -> value
    - Table: Primary key -> Row
    - Database: Table name -> Table
    - Environment: Database name -> Database
"""

from jsdb.domain.entities.container import Container, ValueT
from jsdb.domain.entities.database import Database
from jsdb.domain.entities.environment import Environment
from jsdb.domain.entities.row import Row
from jsdb.domain.entities.table import Table

__all__ = [
    "Container",
    "ValueT",
    "Row",
    "Table",
    "Database",
    "Environment",
]
