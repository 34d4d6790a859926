"""
Undo log for compound operations.

A ``UnitOfWork`` records the state of every entity an operation is
about to touch.  If the ``with`` block raises, tracked entities are
restored from their snapshots (and entities created inside the block
are removed) before the exception propagates.
"""

import copy
import logging
from typing import Any, Hashable, List, Optional, Tuple

from ..core.repository import Repository

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self) -> None:
        self._undo: List[Tuple[Repository, Hashable, Optional[Any]]] = []

    def track(self, repository: Repository, key: Hashable) -> None:
        """Snapshot the entity stored under ``key`` before it is mutated."""
        self._undo.append((repository, key, copy.deepcopy(repository.get(key))))

    def track_new(self, repository: Repository, key: Hashable) -> None:
        """Record an entity created inside this unit of work."""
        self._undo.append((repository, key, None))

    def rollback(self) -> None:
        for repository, key, snapshot in reversed(self._undo):
            if snapshot is None:
                repository.remove(key)
            else:
                repository.add(key, snapshot)
        self._undo.clear()

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            logger.warning("Rolling back %d change(s) after %s", len(self._undo), exc_type.__name__)
            self.rollback()
        else:
            self._undo.clear()
        return False
