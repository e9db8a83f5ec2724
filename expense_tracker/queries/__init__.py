"""Expense aggregation package."""

from expense_tracker.queries.aggregator import (
    ExpenseAggregator,
    compute_statistics,
    month_key,
    top_categories,
)

__all__ = [
    "ExpenseAggregator",
    "compute_statistics",
    "month_key",
    "top_categories",
]
