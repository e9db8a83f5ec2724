"""
Tests for the Google Sheets storage backend.

A fake worksheet stands in for gspread; no network calls are made.
"""

import asyncio
import datetime as dt
from decimal import Decimal

import pytest

from expense_tracker.models.audit import AuditEventBuilder
from expense_tracker.models.expense import Expense, ExpenseFilter
from expense_tracker.services.storage.google_sheets import (
    AUDIT_COLUMNS,
    EXPENSE_COLUMNS,
    GoogleSheetsAuditStorage,
    GoogleSheetsExpenseStorage,
)


def run_async(coro):
    return asyncio.run(coro)


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the storage classes."""

    def __init__(self, header: list[str]):
        self.rows = [list(header)]

    def get_all_values(self) -> list[list[str]]:
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.rows.append([str(v) for v in row])

    def append_rows(self, rows, value_input_option=None):
        for row in rows:
            self.append_row(row)

    def batch_update(self, updates):
        for update in updates:
            # Ranges look like A5:I5
            row_number = int(update["range"].split(":")[0][1:])
            self.rows[row_number - 1] = [str(v) for v in update["values"][0]]

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSheetsClient:
    def __init__(self):
        self.expenses = FakeWorksheet(EXPENSE_COLUMNS)
        self.audit = FakeWorksheet(AUDIT_COLUMNS)

    def get_expenses_sheet(self):
        return self.expenses

    def get_audit_sheet(self):
        return self.audit


def make_expense(**overrides) -> Expense:
    data = {
        "user_id": "user-1",
        "amount": Decimal("20.50"),
        "description": "Lunch",
        "date": dt.date(2024, 1, 15),
        "category": "Food",
        "payment_method": "Card",
    }
    data.update(overrides)
    return Expense(**data)


class TestGoogleSheetsExpenseStorage:
    """Tests for the sheet-backed expense store."""

    def setup_method(self):
        self.client = FakeSheetsClient()
        self.storage = GoogleSheetsExpenseStorage(self.client)

    def test_insert_and_read_back(self):
        """Test that a stored row parses back to the same expense."""
        expense = make_expense()
        run_async(self.storage.insert_expense(expense))

        found = run_async(self.storage.find_expenses(ExpenseFilter(user_id="user-1")))

        assert len(found) == 1
        assert found[0].id == expense.id
        assert found[0].amount == Decimal("20.50")
        assert found[0].date == dt.date(2024, 1, 15)
        assert found[0].created_at == expense.created_at

    def test_batch_insert_is_one_append(self):
        """Test that a batch lands as consecutive rows."""
        run_async(self.storage.insert_expenses([make_expense(), make_expense(), make_expense()]))
        assert len(self.client.expenses.rows) == 4

    def test_order_and_pagination(self):
        """Test newest-first order with skip/limit."""
        run_async(self.storage.insert_expenses([
            make_expense(description=str(day), date=dt.date(2024, 1, day))
            for day in range(1, 6)
        ]))
        page = run_async(self.storage.find_expenses(ExpenseFilter(user_id="user-1"), skip=1, limit=2))
        assert [e.description for e in page] == ["4", "3"]

    def test_update_is_scoped_to_owner(self):
        """Test that only the owner can update a row."""
        expense = make_expense()
        run_async(self.storage.insert_expense(expense))

        assert run_async(self.storage.update_expense("user-2", expense.id, {"category": "x"})) is None
        updated = run_async(self.storage.update_expense("user-1", expense.id, {"category": "Dining"}))

        assert updated.category == "Dining"
        stored = run_async(self.storage.find_expenses(ExpenseFilter(user_id="user-1")))
        assert stored[0].category == "Dining"

    def test_delete_many_bottom_up(self):
        """Test deleting non-adjacent rows leaves the others intact."""
        expenses = [make_expense(description=str(n)) for n in range(5)]
        run_async(self.storage.insert_expenses(expenses))

        deleted = run_async(self.storage.delete_expenses(
            "user-1", [expenses[1].id, expenses[3].id, "missing"]
        ))

        assert deleted == 2
        remaining = run_async(self.storage.find_expenses(ExpenseFilter(user_id="user-1")))
        assert sorted(e.description for e in remaining) == ["0", "2", "4"]

    def test_malformed_rows_are_skipped(self):
        """Test that a hand-edited bad row doesn't break reads."""
        run_async(self.storage.insert_expense(make_expense()))
        self.client.expenses.rows.append(["bad-id", "user-1", "not money"])
        assert run_async(self.storage.count_expenses(ExpenseFilter(user_id="user-1"))) == 1


class TestGoogleSheetsAuditStorage:
    """Tests for the sheet-backed audit log."""

    def test_append_and_filter_by_user(self):
        """Test appending events and reading them back per user."""
        storage = GoogleSheetsAuditStorage(FakeSheetsClient())
        run_async(storage.append_event(AuditEventBuilder.expense_deleted("user-1", "exp-1")))
        run_async(storage.append_event(AuditEventBuilder.bulk_delete("user-2", 2, 2)))

        events = run_async(storage.get_recent_events(user_id="user-1"))

        assert len(events) == 1
        assert events[0].entity_id == "exp-1"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
