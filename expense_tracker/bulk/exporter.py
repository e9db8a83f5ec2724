"""
CSV Export

Writes a user's expenses in the same column layout the importer reads:
amount, description, date, category, paymentMethod.

Dates are written as YYYY-MM-DD by default. Pass import_date_format=True
to write M/D/YYYY instead, which re-imports without editing.
"""

import csv
import io

from expense_tracker.models.expense import Expense, ExpenseFilter
from expense_tracker.services.storage import ExpenseStorageInterface
from expense_tracker.validation import CSV_COLUMNS, format_import_date


def expense_to_row(expense: Expense, import_date_format: bool = False) -> list[str]:
    return [
        format(expense.amount, "f"),
        expense.description,
        format_import_date(expense.date) if import_date_format else expense.date.isoformat(),
        expense.category,
        expense.payment_method,
    ]


def render_csv(expenses: list[Expense], import_date_format: bool = False) -> str:
    """Serialize expenses with a header row."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for expense in expenses:
        writer.writerow(expense_to_row(expense, import_date_format))
    return output.getvalue()


class ExpenseExporter:
    """Loads and serializes every expense a user owns."""

    def __init__(self, storage: ExpenseStorageInterface):
        self._storage = storage

    async def load(self, user_id: str) -> list[Expense]:
        """All of the user's expenses, newest date first."""
        return [
            expense
            async for expense in self._storage.iter_expenses(ExpenseFilter(user_id=user_id))
        ]

    async def export_csv(self, user_id: str, import_date_format: bool = False) -> str:
        return render_csv(await self.load(user_id), import_date_format)
