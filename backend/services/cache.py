"""Cache port used by collaborators that memoize (e.g. embedding providers).

The scoring and selection engines never cache; only the boundary
collaborators do, through this interface.
"""

import threading
from collections import OrderedDict
from typing import Any, Protocol


class CachePort(Protocol):
    def get(self, key: str) -> Any | None:
        """Return the cached value or None."""

    def set(self, key: str, value: Any) -> None:
        """Store a value."""

    def evict(self, key: str) -> None:
        """Drop a key if present."""


class InMemoryCache:
    """Bounded, thread-safe LRU cache."""

    def __init__(self, max_size: int = 1024) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be greater than 0")
        self.max_size = max_size
        self._data: OrderedDict[str, Any] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            if key not in self._data:
                return None
            self._data.move_to_end(key)
            return self._data[key]

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            self._data.move_to_end(key)
            while len(self._data) > self.max_size:
                self._data.popitem(last=False)

    def evict(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)
