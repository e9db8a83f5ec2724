"""
Tests for CSV export.
"""

import asyncio
import csv
import datetime as dt
import io
from decimal import Decimal

import pytest

from expense_tracker.bulk import ExpenseExporter, ExpenseImporter, render_csv
from expense_tracker.models.expense import Expense
from expense_tracker.services.storage import InMemoryExpenseStorage


def run_async(coro):
    return asyncio.run(coro)


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


class TestRenderCsv:
    """Tests for CSV rendering."""

    def test_header_only_when_empty(self):
        """Test that an empty export still has the header."""
        assert render_csv([]) == "amount,description,date,category,paymentMethod\n"

    def test_row_layout(self):
        """Test column order, ISO dates and plain decimal amounts."""
        output = render_csv([make_expense(amount=Decimal("1E+2"))])
        lines = output.splitlines()
        assert lines[1] == "100,Lunch,2024-01-15,Food,Card"

    def test_import_date_format(self):
        """Test the optional M/D/YYYY date style."""
        output = render_csv([make_expense()], import_date_format=True)
        assert output.splitlines()[1] == "20.50,Lunch,1/15/2024,Food,Card"

    def test_values_with_commas_are_quoted(self):
        """Test that descriptions containing commas survive parsing."""
        output = render_csv([make_expense(description='Dinner, "team"')])
        row = next(csv.DictReader(io.StringIO(output)))
        assert row["description"] == 'Dinner, "team"'


class TestExpenseExporter:
    """Tests for ExpenseExporter."""

    def test_newest_first_and_owner_only(self):
        """Test ordering by date descending and user scoping."""
        storage = InMemoryExpenseStorage([
            make_expense(description="old", date=dt.date(2024, 1, 1)),
            make_expense(description="new", date=dt.date(2024, 3, 1)),
            make_expense(description="mid", date=dt.date(2024, 2, 1)),
            make_expense(description="other user", user_id="user-2"),
        ])
        output = run_async(ExpenseExporter(storage).export_csv("user-1"))

        descriptions = [row["description"] for row in csv.DictReader(io.StringIO(output))]
        assert descriptions == ["new", "mid", "old"]

    def test_import_format_export_reimports(self):
        """Test that an M/D/YYYY export can be imported unchanged."""
        source = InMemoryExpenseStorage([
            make_expense(amount=Decimal("30"), date=dt.date(2024, 2, 3)),
            make_expense(amount=Decimal("70.25"), description="Fuel", category="Transport"),
        ])
        output = run_async(ExpenseExporter(source).export_csv("user-1", import_date_format=True))

        target = InMemoryExpenseStorage()
        result = run_async(ExpenseImporter(target).import_csv("user-2", output))

        assert result.succeeded
        assert sorted(e.amount for e in result.inserted) == [Decimal("30"), Decimal("70.25")]
        assert {e.date for e in result.inserted} == {dt.date(2024, 2, 3), dt.date(2024, 1, 15)}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
