"""Bounded cache of lazily-built collection handles (LRU + TTL)."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable
import threading
import time
from typing import Generic
from typing import TypeVar

K = TypeVar("K")
V = TypeVar("V")


class BoundedCache(Generic[K, V]):
    """At most ``max_size`` entries; each lives ``ttl`` seconds after creation.

    A ``ttl`` of ``None`` disables expiry. ``clock`` is injectable for tests.
    """

    def __init__(
        self,
        max_size: int = 32,
        ttl: float | None = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[K, tuple[float, V]] = OrderedDict()
        self._lock = threading.Lock()

    def _expired(self, created: float) -> bool:
        return self.ttl is not None and self._clock() - created >= self.ttl

    def get(self, key: K) -> V | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            created, value = entry
            if self._expired(created):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    def put(self, key: K, value: V) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def get_or_create(self, key: K, factory: Callable[[K], V]) -> V:
        """Return the cached value, building it with ``factory(key)`` on a miss."""
        value = self.get(key)
        if value is None:
            # Built outside the lock: factories make network calls.
            value = factory(key)
            self.put(key, value)
        return value

    def evict(self, key: K) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
