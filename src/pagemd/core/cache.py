"""In-memory read-through cache with time-based expiry"""

import json
import logging
import threading
import time
from typing import Any, Callable, Generic, Optional, TypeVar

from pagemd.core.utils.hashing import sha256


logger = logging.getLogger(__name__)

T = TypeVar("T")
Clock = Callable[[], float]


class TTLCache(Generic[T]):
    """Key -> value map whose entries expire `ttl` seconds after they were written.

    Writes are atomic per key and the last write wins; there is no explicit
    invalidation. A ttl of 0 disables caching. Values are handed out as
    stored, so callers cache immutable values.
    """

    def __init__(self, ttl: float, clock: Clock = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[float, T]] = {}
        self._lock = threading.Lock()
        self.stats = {"hits": 0, "misses": 0}

    def get(self, key: str) -> Optional[T]:
        """Return the cached value, or None when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() < entry[0]:
                self.stats["hits"] += 1
                return entry[1]
            if entry is not None:
                del self._entries[key]
            self.stats["misses"] += 1
            return None

    def set(self, key: str, value: T) -> None:
        if self.ttl <= 0:
            return
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl, value)

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        """Return the cached value or call loader, store and return its result.

        The loader runs outside the lock; concurrent misses may both load and
        the later write simply overwrites the earlier one.
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug("Cache hit", extra={"cache_key": key})
            return cached
        logger.debug("Cache miss", extra={"cache_key": key})
        value = loader()
        self.set(key, value)
        return value

    def __len__(self) -> int:
        """Number of stored entries, including expired ones not yet read."""
        with self._lock:
            return len(self._entries)


def cache_key(*parts: Any) -> str:
    """Stable signature for a listing query."""
    return sha256(json.dumps(parts, sort_keys=True, default=str))
