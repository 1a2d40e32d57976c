"""Class-scoped lazy caches for structural metadata.

Column descriptors, schemas, and field shapes are computed once per model
class and then only read. `ClassCache` publishes each value under a lock so a
factory runs at most once per key even when several threads race on first
access.
"""

from __future__ import annotations

import threading
import weakref
from typing import Callable, Dict, Generic, Hashable, TypeVar

V = TypeVar("V")

_ALL_CACHES: "weakref.WeakSet[ClassCache]" = weakref.WeakSet()


class ClassCache(Generic[V]):
    """Write-once mapping from a hashable key (usually a class) to a value."""

    def __init__(self, name: str):
        self.name = name
        self._values: Dict[Hashable, V] = {}
        self._lock = threading.RLock()
        _ALL_CACHES.add(self)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def get(self, key: Hashable) -> V:
        """Return the cached value; raises `KeyError` when absent."""

        return self._values[key]

    def get_or_create(self, key: Hashable, factory: Callable[[], V]) -> V:
        """Return the value for `key`, building it with `factory` on first use."""

        try:
            return self._values[key]
        except KeyError:
            pass

        with self._lock:
            if key not in self._values:
                self._values[key] = factory()
            return self._values[key]

    def clear(self) -> None:
        with self._lock:
            self._values.clear()


def reset_class_caches() -> None:
    """Clear every class-scoped cache (test isolation hook)."""

    for cache in list(_ALL_CACHES):
        cache.clear()
