"""
Expense List Cache

DESIGN DECISION: The cache is strictly best effort.
- A failed read is a miss (we go to the store)
- A failed write is ignored (the next read repopulates)
- A failed invalidation is logged and swallowed

The store is the source of truth; the cache must never turn an
infrastructure hiccup into a failed request.

Key layout: "{prefix}:{user_id}:{canonical query JSON}".
Every key for a user shares the "{prefix}:{user_id}:" prefix, which is
what invalidation deletes by.
"""

from typing import Optional

import structlog
from pydantic import ValidationError

from expense_tracker.models.expense import EXACT_MONEY, ExpensePage, ExpenseQuery
from expense_tracker.services.cache.interface import CacheInterface


logger = structlog.get_logger(__name__)


class ExpenseCacheManager:
    """Reads, writes and invalidates cached expense list pages."""

    def __init__(
        self,
        cache: CacheInterface,
        ttl_seconds: int = 300,
        key_prefix: str = "expenses",
    ):
        self._cache = cache
        self._ttl = ttl_seconds
        self._prefix = key_prefix

    def user_prefix(self, user_id: str) -> str:
        return f"{self._prefix}:{user_id}:"

    def key_for(self, user_id: str, query: ExpenseQuery) -> str:
        return self.user_prefix(user_id) + query.canonical_json()

    async def get_page(self, user_id: str, query: ExpenseQuery) -> Optional[ExpensePage]:
        """Return the cached page, or None on miss or any cache failure."""
        key = self.key_for(user_id, query)
        try:
            raw = await self._cache.get(key)
        except Exception as e:
            logger.warning("cache_read_failed", user_id=user_id, error=str(e))
            return None

        if raw is None:
            return None

        try:
            return ExpensePage.model_validate_json(raw)
        except ValidationError:
            # Stale layout from an older release; treat as a miss
            logger.warning("cache_entry_unreadable", user_id=user_id, key=key)
            return None

    async def store_page(self, user_id: str, query: ExpenseQuery, page: ExpensePage) -> None:
        key = self.key_for(user_id, query)
        try:
            payload = page.model_dump_json(by_alias=True, context={EXACT_MONEY: True})
            await self._cache.set(key, payload, self._ttl)
        except Exception as e:
            logger.warning("cache_write_failed", user_id=user_id, error=str(e))

    async def invalidate_user(self, user_id: str) -> bool:
        """
        Remove every cached page for the user.

        Returns:
            True if invalidation completed, False if the cache failed
            (already logged; the caller must not fail the write)
        """
        try:
            keys = await self._cache.keys(self.user_prefix(user_id))
            removed = await self._cache.delete(keys) if keys else 0
        except Exception as e:
            logger.warning("cache_invalidation_failed", user_id=user_id, error=str(e))
            return False

        logger.debug("cache_invalidated", user_id=user_id, removed=removed)
        return True
