"""
Keyed storage used by the service layer.

Every service keeps its entities in a ``Repository``.  The default
implementation is an insertion-ordered in-memory mapping; a durable
backend only needs to implement the same handful of methods.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Generic, Hashable, Iterator, List, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
E = TypeVar("E")


class Repository(ABC, Generic[K, E]):
    """Abstract id -> entity store."""

    @abstractmethod
    def get(self, key: K) -> Optional[E]:
        """Return the entity stored under ``key`` or ``None``."""

    @abstractmethod
    def add(self, key: K, entity: E) -> None:
        """Store ``entity`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: K) -> bool:
        """Delete ``key``; return whether it was present."""

    @abstractmethod
    def values(self) -> List[E]:
        """All entities in insertion order."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every entity."""

    def find(self, predicate: Callable[[E], bool]) -> List[E]:
        return [entity for entity in self.values() if predicate(entity)]

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self.values())

    def __iter__(self) -> Iterator[E]:
        return iter(self.values())


class InMemoryRepository(Repository[K, E]):
    """Repository backed by a plain ``dict`` (process lifetime only)."""

    def __init__(self) -> None:
        self._items: Dict[K, E] = {}

    def get(self, key: K) -> Optional[E]:
        return self._items.get(key)

    def add(self, key: K, entity: E) -> None:
        self._items[key] = entity

    def remove(self, key: K) -> bool:
        return self._items.pop(key, None) is not None

    def values(self) -> List[E]:
        return list(self._items.values())

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
