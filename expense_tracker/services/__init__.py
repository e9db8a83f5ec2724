"""Services package."""

from expense_tracker.services.cache import (
    CacheError,
    CacheInterface,
    ExpenseCacheManager,
    InMemoryCache,
)
from expense_tracker.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    ExpenseStorageInterface,
    InMemoryAuditStorage,
    InMemoryExpenseStorage,
    StorageError,
)

__all__ = [
    # Cache services
    "CacheError",
    "CacheInterface",
    "ExpenseCacheManager",
    "InMemoryCache",
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "ExpenseStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryExpenseStorage",
    "StorageError",
]
