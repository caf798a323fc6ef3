"""Public error types.

The core containers never raise for collisions or absent keys. These
errors belong to the path-addressed Store facade and the optional lock
layer, which sit on top of the core.
"""

from __future__ import annotations


class JSDBError(Exception):
    """Base class for all jsdb errors."""


class NotFoundError(JSDBError, KeyError):
    """Raised when a write targets a path whose parent does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class DatabaseNotFoundError(NotFoundError):
    """The named database is not in the environment."""


class TableNotFoundError(NotFoundError):
    """The named table is not in the database."""


class RowNotFoundError(NotFoundError):
    """No row is stored under the primary key."""


class LockTimeoutError(JSDBError):
    """Raised when a lock wait times out."""
