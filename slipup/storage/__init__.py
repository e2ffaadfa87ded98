"""Storage abstraction — where habit snapshots are kept.

The store talks to storage through load/save on a single key. Any backend
that can hold a JSON-shaped dict per key works (SQLite by default).
"""

import copy
import logging
from abc import ABC, abstractmethod

log = logging.getLogger(__name__)


class Storage(ABC):
    """Abstract key-value snapshot storage.

    Backends must give last-write-wins semantics per key.
    """

    @abstractmethod
    def load(self, key: str) -> dict | None:
        """Return the snapshot stored under key, or None if absent."""
        ...

    @abstractmethod
    def save(self, key: str, snapshot: dict) -> None:
        """Replace the snapshot stored under key. Raise on failure."""
        ...


class MemoryStorage(Storage):
    """In-process storage. Nothing survives a restart."""

    def __init__(self, initial: dict[str, dict] | None = None) -> None:
        self._data: dict[str, dict] = copy.deepcopy(initial) if initial else {}

    def load(self, key: str) -> dict | None:
        snapshot = self._data.get(key)
        return copy.deepcopy(snapshot) if snapshot is not None else None

    def save(self, key: str, snapshot: dict) -> None:
        self._data[key] = copy.deepcopy(snapshot)
        log.debug("Stored snapshot %s in memory", key)
