"""
In-process TTL cache for the public product listing.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional

from cachetools import TTLCache


class ProductCache:
    """
    Read-through cache with explicit invalidation. Entries simply expire after
    ``ttl_seconds``; there is no stale-while-revalidate.
    """

    def __init__(
        self,
        ttl_seconds: float = 1800,
        maxsize: int = 32,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=timer)
        # Sync endpoints run in a thread pool; TTLCache is not thread-safe.
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            value = self._cache.get(key)
            if value is None:
                self.misses += 1
            else:
                self.hits += 1
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._cache[key] = value

    def invalidate(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._cache.clear()
            else:
                self._cache.pop(key, None)

    def stats(self) -> dict:
        with self._lock:
            self._cache.expire()
            return {
                "hits": self.hits,
                "misses": self.misses,
                "keys": len(self._cache),
                "ttl_seconds": self.ttl_seconds,
            }
