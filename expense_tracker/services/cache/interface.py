"""
Abstract Cache Interface

The key-value cache that holds serialized list results. Only the four
operations the invalidation policy needs are part of the contract.
"""

from abc import ABC, abstractmethod
from typing import Optional


class CacheInterface(ABC):
    """Key-value store with per-entry time-to-live."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value, or None if missing or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value that expires after ttl_seconds."""
        pass

    @abstractmethod
    async def keys(self, prefix: str) -> list[str]:
        """List live keys that start with prefix."""
        pass

    @abstractmethod
    async def delete(self, keys: list[str]) -> int:
        """
        Delete the given keys.

        Returns:
            Number of keys that existed and were removed
        """
        pass


class CacheError(Exception):
    """The cache backend could not complete an operation."""
    pass
