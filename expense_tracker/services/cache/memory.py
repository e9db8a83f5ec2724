"""
In-Memory Cache Implementation

A process-local TTL cache. Expired entries are evicted lazily when they
are read or listed.
"""

import time
from typing import Callable, Optional

from expense_tracker.services.cache.interface import CacheError, CacheInterface


class InMemoryCache(CacheInterface):
    """
    Dict-backed cache with expiry timestamps.

    Args:
        clock: Returns the current time in seconds. Injected so tests
               can move time forward without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}
        # Simulates an unreachable cache server
        self.available = True

    def _check_available(self) -> None:
        if not self.available:
            raise CacheError("Cache backend unreachable")

    def _live(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def get(self, key: str) -> Optional[str]:
        self._check_available()
        return self._live(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._check_available()
        self._entries[key] = (value, self._clock() + ttl_seconds)

    async def keys(self, prefix: str) -> list[str]:
        self._check_available()
        return [
            key for key in list(self._entries)
            if key.startswith(prefix) and self._live(key) is not None
        ]

    async def delete(self, keys: list[str]) -> int:
        self._check_available()
        removed = 0
        for key in keys:
            if self._entries.pop(key, None) is not None:
                removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._entries)
