"""
Expense Aggregation

DESIGN DECISION: Aggregation is DETERMINISTIC and runs over real stored rows.
Nothing is estimated or sampled: every figure is a Decimal sum over the
records the store returns for the user's filter.

INVARIANT: for any record set, the per-category sums and the per-month
sums each add up to the overall total.
"""

import datetime as dt
from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from expense_tracker.models.expense import (
    CategoryTotal,
    Expense,
    ExpenseFilter,
    ExpenseStatistics,
    ExpenseSummary,
)
from expense_tracker.services.storage import ExpenseStorageInterface


# How many categories the summary reports
TOP_CATEGORIES = 3


def month_key(value: dt.date) -> str:
    """Month bucket label, e.g. 2024-2 (month is not zero padded)."""
    return f"{value.year}-{value.month}"


def compute_statistics(expenses: Iterable[Expense]) -> ExpenseStatistics:
    """Totals, mean and per-category/per-month sums for a record set."""
    total = Decimal("0")
    count = 0
    by_category: dict[str, Decimal] = defaultdict(Decimal)
    by_month: dict[str, Decimal] = defaultdict(Decimal)

    for expense in expenses:
        total += expense.amount
        count += 1
        by_category[expense.category] += expense.amount
        by_month[month_key(expense.date)] += expense.amount

    if count == 0:
        return ExpenseStatistics()

    return ExpenseStatistics(
        total_expenses=total,
        average_expense=total / count,
        expense_count=count,
        expenses_by_category=dict(by_category),
        expenses_by_month=dict(by_month),
    )


def top_categories(
    by_category: dict[str, Decimal],
    limit: int = TOP_CATEGORIES,
) -> list[CategoryTotal]:
    """Largest categories first; equal totals ordered by name."""
    ranked = sorted(by_category.items(), key=lambda item: (-item[1], item[0]))
    return [CategoryTotal(name=name, total=total) for name, total in ranked[:limit]]


class ExpenseAggregator:
    """
    Computes statistics and summaries for one user's expenses.

    GUARANTEES:
    - Only the requesting user's records are ever read
    - Empty ranges produce zero totals and empty breakdowns, not errors
    """

    def __init__(self, storage: ExpenseStorageInterface):
        self._storage = storage

    async def _collect(self, expense_filter: ExpenseFilter) -> list[Expense]:
        return [expense async for expense in self._storage.iter_expenses(expense_filter)]

    async def statistics(
        self,
        user_id: str,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
    ) -> ExpenseStatistics:
        """
        Aggregate the user's expenses dated within [start_date, end_date].

        Args:
            user_id: Owner of the records
            start_date: Inclusive lower bound (default: no lower bound)
            end_date: Inclusive upper bound (default: today)
        """
        expense_filter = ExpenseFilter(
            user_id=user_id,
            start_date=start_date or dt.date.min,
            end_date=end_date or dt.date.today(),
        )
        return compute_statistics(await self._collect(expense_filter))

    async def summary(self, user_id: str) -> ExpenseSummary:
        """Overall total plus the top categories by spend."""
        stats = compute_statistics(await self._collect(ExpenseFilter(user_id=user_id)))
        return ExpenseSummary(
            total_expenses=stats.total_expenses,
            categories=top_categories(stats.expenses_by_category),
        )
