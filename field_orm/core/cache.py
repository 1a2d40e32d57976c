"""Process-local cache storage for `CacheRepository`."""

from __future__ import annotations

import copy
import threading
from typing import Any, Dict

from .errors import CacheStorageError


class InMemoryCacheStorage:
    """Dict-backed cache storage with a key prefix.

    Stored values are deep-copied on save and load, so callers never share
    mutable rows with the cache.
    """

    def __init__(self, prefix: str = ""):
        self.prefix = prefix
        self._items: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def _key(self, key: str) -> str:
        return self.prefix + key

    def exists(self, key: str) -> bool:
        return self._key(key) in self._items

    def load(self, key: str) -> Any:
        """Return the stored value.

        Raises:
            CacheStorageError: When nothing is stored under `key`.
        """

        try:
            value = self._items[self._key(key)]
        except KeyError:
            raise CacheStorageError(f"Cannot load cache for key {key}") from None
        return copy.deepcopy(value)

    def save(self, key: str, value: Any) -> bool:
        with self._lock:
            self._items[self._key(key)] = copy.deepcopy(value)
        return True

    def invalidate(self, key: str) -> bool:
        """Remove the stored value.

        Raises:
            CacheStorageError: When nothing is stored under `key`.
        """

        with self._lock:
            if self._key(key) not in self._items:
                raise CacheStorageError(f"Cannot invalidate cache for key {key}")
            del self._items[self._key(key)]
        return True

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
