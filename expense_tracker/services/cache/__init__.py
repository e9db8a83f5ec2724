"""Cache services package."""

from expense_tracker.services.cache.interface import CacheError, CacheInterface
from expense_tracker.services.cache.manager import ExpenseCacheManager
from expense_tracker.services.cache.memory import InMemoryCache

__all__ = [
    "CacheError",
    "CacheInterface",
    "ExpenseCacheManager",
    "InMemoryCache",
]
