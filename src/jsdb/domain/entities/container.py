"""Shared mapping plumbing for every level of the container hierarchy.

Each level (Row, Table, Database, Environment) is a thin wrapper around a
single ``dict`` of children. This base class gives all four the same
read-only mapping surface, so a query layer can walk the tree without
caring which level it is looking at, and centralizes the two mutations
every level performs: insert-or-replace and remove-if-present.

Containers hold no reference to their parent. Ownership flows strictly
downward, so dropping a container drops its whole subtree.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable, ItemsView, Iterator, KeysView, ValuesView
from typing import Generic, TypeVar, overload

KeyT = TypeVar("KeyT", bound=Hashable)
ChildT = TypeVar("ChildT")
DefaultT = TypeVar("DefaultT")

ValueT = TypeVar("ValueT")
"""Payload type stored in columns. Fixed per Environment, shared by every Row."""

_MISSING = object()


class Container(ABC, Generic[KeyT, ChildT]):
    """Read-only mapping view over a container's children.

    Subclasses expose their child dict under a level-specific attribute
    (``columns``, ``rows``, ``tables``, ``databases``) and return it from
    ``_children``. Iteration order is whatever the underlying dict yields
    and is not part of the contract.
    """

    @property
    @abstractmethod
    def _children(self) -> dict[KeyT, ChildT]:
        """The mapping that owns this container's children."""

    def __len__(self) -> int:
        return len(self._children)

    def __contains__(self, key: object) -> bool:
        return key in self._children

    def __iter__(self) -> Iterator[KeyT]:
        return iter(self._children)

    def __getitem__(self, key: KeyT) -> ChildT:
        return self._children[key]

    @overload
    def get(self, key: KeyT) -> ChildT | None: ...

    @overload
    def get(self, key: KeyT, default: DefaultT) -> ChildT | DefaultT: ...

    def get(self, key, default=None):
        """Return the child at key, or default when absent."""
        return self._children.get(key, default)

    def keys(self) -> KeysView[KeyT]:
        return self._children.keys()

    def values(self) -> ValuesView[ChildT]:
        return self._children.values()

    def items(self) -> ItemsView[KeyT, ChildT]:
        return self._children.items()

    def is_empty(self) -> bool:
        """Return True if the container has no children."""
        return not self._children

    def _insert(self, key: KeyT, child: ChildT) -> bool:
        """Insert or replace a child.

        Returns:
            True if an existing child was replaced
        """
        replaced = key in self._children
        self._children[key] = child
        return replaced

    def _remove(self, key: KeyT) -> bool:
        """Remove a child if present.

        Returns:
            True if a child was removed, False if the key was absent
        """
        return self._children.pop(key, _MISSING) is not _MISSING
