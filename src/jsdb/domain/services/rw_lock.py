"""Readers-writer lock for shared access to a container tree.

The core containers are lock-free. When a tree is shared
between threads, one ReadWriteLock guards the whole of it:

    - SHARED (read): any number of holders at once
    - EXCLUSIVE (write): a single holder, no readers

Writers are preferred: once a writer is waiting, new readers queue behind
it so a steady stream of readers cannot starve writes.

The lock is not reentrant. A thread holding the read lock that asks for the
write lock will wait for itself; release the read lock first.

References:
    - Courtois, Heymans & Parnas, "Concurrent Control with Readers and Writers" (1971)
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Iterator

from jsdb.domain.errors import LockTimeoutError


class ReadWriteLock:
    """Multiple-reader, single-writer lock with writer preference.

    Thread Safety:
        All state is guarded by one condition variable.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @property
    def readers(self) -> int:
        """Number of threads currently holding the read lock."""
        with self._cond:
            return self._readers

    @property
    def is_write_locked(self) -> bool:
        """True while a writer holds the lock."""
        with self._cond:
            return self._writer

    def acquire_read(self, timeout: float | None = None) -> float:
        """Acquire the lock in shared mode.

        Args:
            timeout: Max seconds to wait (None = forever)

        Returns:
            Seconds spent waiting

        Raises:
            LockTimeoutError: If timeout expires first
        """
        start = time.monotonic()
        with self._cond:
            ok = self._cond.wait_for(
                lambda: not self._writer and self._writers_waiting == 0,
                timeout=timeout,
            )
            if not ok:
                raise LockTimeoutError(f"read lock not acquired within {timeout}s")
            self._readers += 1
        return time.monotonic() - start

    def release_read(self) -> None:
        """Release a shared hold.

        Raises:
            RuntimeError: If no reader holds the lock
        """
        with self._cond:
            if self._readers == 0:
                raise RuntimeError("release_read called without a read lock held")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self, timeout: float | None = None) -> float:
        """Acquire the lock in exclusive mode.

        Args:
            timeout: Max seconds to wait (None = forever)

        Returns:
            Seconds spent waiting

        Raises:
            LockTimeoutError: If timeout expires first
        """
        start = time.monotonic()
        with self._cond:
            self._writers_waiting += 1
            try:
                ok = self._cond.wait_for(
                    lambda: not self._writer and self._readers == 0,
                    timeout=timeout,
                )
            finally:
                self._writers_waiting -= 1
            if not ok:
                # Readers held back by this writer may proceed now
                self._cond.notify_all()
                raise LockTimeoutError(f"write lock not acquired within {timeout}s")
            self._writer = True
        return time.monotonic() - start

    def release_write(self) -> None:
        """Release the exclusive hold.

        Raises:
            RuntimeError: If no writer holds the lock
        """
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write called without the write lock held")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self, timeout: float | None = None) -> Iterator[float]:
        """Hold the read lock for the duration of a with-block.

        Yields:
            Seconds spent waiting for the lock
        """
        waited = self.acquire_read(timeout)
        try:
            yield waited
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self, timeout: float | None = None) -> Iterator[float]:
        """Hold the write lock for the duration of a with-block.

        Yields:
            Seconds spent waiting for the lock
        """
        waited = self.acquire_write(timeout)
        try:
            yield waited
        finally:
            self.release_write()


class NullLock:
    """Stand-in for ReadWriteLock when a Store is used from one thread only."""

    readers = 0
    is_write_locked = False

    @contextmanager
    def read_locked(self, timeout: float | None = None) -> Iterator[float]:
        yield 0.0

    @contextmanager
    def write_locked(self, timeout: float | None = None) -> Iterator[float]:
        yield 0.0
