"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker system.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    BulkDeleteResult,
    CategoryTotal,
    Expense,
    ExpenseCreate,
    ExpenseFilter,
    ExpensePage,
    ExpenseQuery,
    ExpenseStatistics,
    ExpenseSummary,
    ExpenseUpdate,
    ImportResult,
    Money,
    RowError,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "BulkDeleteResult",
    "CategoryTotal",
    "Expense",
    "ExpenseCreate",
    "ExpenseFilter",
    "ExpensePage",
    "ExpenseQuery",
    "ExpenseStatistics",
    "ExpenseSummary",
    "ExpenseUpdate",
    "ImportResult",
    "Money",
    "RowError",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
