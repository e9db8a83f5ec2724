"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real document database later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Every operation that targets existing records is scoped by user_id, so
one user can never read or modify another user's expenses.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from expense_tracker.models.audit import AuditEvent
from expense_tracker.models.expense import Expense, ExpenseFilter, utcnow


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Any storage implementation (Google Sheets, MongoDB, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def find_expenses(
        self,
        expense_filter: ExpenseFilter,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[Expense]:
        """
        Find expenses matching a filter.

        Results are ordered newest date first; expenses on the same date
        are ordered by creation time, newest first.

        Args:
            expense_filter: Owner and optional field filters
            skip: Number of results to skip
            limit: Maximum number of results (None = all)

        Returns:
            List of matching expenses
        """
        pass

    @abstractmethod
    async def count_expenses(self, expense_filter: ExpenseFilter) -> int:
        """Count expenses matching a filter."""
        pass

    async def iter_expenses(
        self,
        expense_filter: ExpenseFilter,
    ) -> AsyncIterator[Expense]:
        """
        Iterate over every matching expense in list order.

        Used by export and aggregation. Backends with cursors should
        override this to avoid materializing the full result.
        """
        for expense in await self.find_expenses(expense_filter):
            yield expense

    @abstractmethod
    async def insert_expense(self, expense: Expense) -> Expense:
        """
        Insert a single expense.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def insert_expenses(self, expenses: list[Expense]) -> list[Expense]:
        """
        Insert a batch of expenses.

        NOTE: Not transactional. If the backend fails partway through,
        the records written before the failure stay written and a
        StorageError is raised.
        """
        pass

    @abstractmethod
    async def update_expense(
        self,
        user_id: str,
        expense_id: str,
        changes: dict,
    ) -> Optional[Expense]:
        """
        Apply a partial update to one of the user's expenses.

        Args:
            user_id: Owner the expense must belong to
            expense_id: The expense's identifier
            changes: Field name -> new value (Python field names)

        Returns:
            The updated expense, or None if no such expense is owned by user_id
        """
        pass

    @abstractmethod
    async def delete_expense(
        self,
        user_id: str,
        expense_id: str,
    ) -> Optional[Expense]:
        """
        Delete one of the user's expenses.

        Returns:
            The deleted expense, or None if no such expense is owned by user_id
        """
        pass

    @abstractmethod
    async def delete_expenses(
        self,
        user_id: str,
        expense_ids: list[str],
    ) -> int:
        """
        Delete every listed expense that belongs to the user.

        Ids that don't exist or belong to other users are ignored.

        Returns:
            Number of expenses deleted
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
        user_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events, newest first.

        Args:
            limit: Maximum number of events to return
            user_id: Only events about this user, if given
        """
        pass


def apply_changes(expense: Expense, changes: dict) -> Expense:
    """
    Return a copy of the expense with changes applied and re-validated.

    The owner and identity fields cannot be changed through an update.
    """
    protected = {"id", "user_id", "created_at", "updated_at"}
    allowed = {key: value for key, value in changes.items() if key not in protected}
    data = expense.model_dump()
    data.update(allowed)
    data["updated_at"] = utcnow()
    return Expense.model_validate(data)


def sort_key(expense: Expense) -> tuple:
    """Newest date first, then newest created first (use with reverse=True)."""
    return (expense.date, expense.created_at)


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
