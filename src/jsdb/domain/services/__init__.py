"""Domain services.

Services implement logic that does not belong to a single container.
"""

from jsdb.domain.services.rw_lock import NullLock, ReadWriteLock

__all__ = [
    "NullLock",
    "ReadWriteLock",
]
