"""
In-Memory Storage Implementation

Process-local storage used by the test suite and by the "memory" backend
for local development. Data is lost on restart.

Mirrors the behaviour a document store gives us: single-record writes are
atomic, batch inserts are not.
"""

from typing import Optional

from expense_tracker.models.audit import AuditEvent
from expense_tracker.models.expense import Expense, ExpenseFilter
from expense_tracker.services.storage.interface import (
    AuditStorageInterface,
    ExpenseStorageInterface,
    StorageError,
    apply_changes,
    sort_key,
)


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """
    Dict-backed expense storage.

    fail_after_inserts simulates a store outage in the middle of a batch:
    when set, only that many records of the next batch are written before
    a StorageError is raised.
    """

    def __init__(self, expenses: Optional[list[Expense]] = None):
        self._expenses: dict[str, Expense] = {}
        self.fail_after_inserts: Optional[int] = None
        for expense in expenses or []:
            self._expenses[expense.id] = expense

    def _matching(self, expense_filter: ExpenseFilter) -> list[Expense]:
        matches = [e for e in self._expenses.values() if expense_filter.matches(e)]
        matches.sort(key=sort_key, reverse=True)
        return matches

    async def find_expenses(
        self,
        expense_filter: ExpenseFilter,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[Expense]:
        matches = self._matching(expense_filter)
        end = None if limit is None else skip + limit
        return [e.model_copy() for e in matches[skip:end]]

    async def count_expenses(self, expense_filter: ExpenseFilter) -> int:
        return len(self._matching(expense_filter))

    async def insert_expense(self, expense: Expense) -> Expense:
        if expense.id in self._expenses:
            raise StorageError(f"Duplicate expense id: {expense.id}")
        self._expenses[expense.id] = expense.model_copy()
        return expense

    async def insert_expenses(self, expenses: list[Expense]) -> list[Expense]:
        inserted = []
        for index, expense in enumerate(expenses):
            if self.fail_after_inserts is not None and index >= self.fail_after_inserts:
                raise StorageError(
                    f"Store unavailable after {len(inserted)} of {len(expenses)} inserts"
                )
            inserted.append(await self.insert_expense(expense))
        return inserted

    async def update_expense(
        self,
        user_id: str,
        expense_id: str,
        changes: dict,
    ) -> Optional[Expense]:
        current = self._expenses.get(expense_id)
        if current is None or current.user_id != user_id:
            return None
        updated = apply_changes(current, changes)
        self._expenses[expense_id] = updated
        return updated.model_copy()

    async def delete_expense(
        self,
        user_id: str,
        expense_id: str,
    ) -> Optional[Expense]:
        current = self._expenses.get(expense_id)
        if current is None or current.user_id != user_id:
            return None
        return self._expenses.pop(expense_id)

    async def delete_expenses(
        self,
        user_id: str,
        expense_ids: list[str],
    ) -> int:
        deleted = 0
        for expense_id in set(expense_ids):
            if await self.delete_expense(user_id, expense_id) is not None:
                deleted += 1
        return deleted

    def __len__(self) -> int:
        return len(self._expenses)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_recent_events(
        self,
        limit: int = 100,
        user_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        events = [e for e in self.events if user_id is None or e.user_id == user_id]
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
