"""
Tests for Expense Tracker models

Test strategy:
1. Unit tests for individual components (models, validators, aggregation)
2. Service and API tests against in-memory storage and cache
3. No real Google Sheets calls in tests
"""

import datetime as dt
import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from expense_tracker.models.expense import (
    EXACT_MONEY,
    Expense,
    ExpenseCreate,
    ExpenseFilter,
    ExpensePage,
    ExpenseQuery,
    ExpenseStatistics,
    ExpenseUpdate,
    ImportResult,
    RowError,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


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


class TestExpenseModels:
    """Tests for expense records and payloads."""

    def test_expense_creation(self):
        """Test Expense model creation with generated id and timestamps."""
        expense = make_expense()
        assert expense.id
        assert expense.amount == Decimal("20.50")
        assert expense.created_at.tzinfo is not None

    def test_expense_ids_are_unique(self):
        """Test that each expense gets its own id."""
        assert make_expense().id != make_expense().id

    def test_expense_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValidationError):
            make_expense(amount=Decimal("0"))
        with pytest.raises(ValidationError):
            make_expense(amount=Decimal("-5"))

    def test_expense_json_uses_camel_case(self):
        """Test that the wire format uses camelCase and numeric amounts."""
        data = json.loads(make_expense().model_dump_json(by_alias=True))
        assert data["paymentMethod"] == "Card"
        assert data["userId"] == "user-1"
        assert data["amount"] == 20.5
        assert data["date"] == "2024-01-15"

    def test_exact_money_context_keeps_digits(self):
        """Test that the exact-money context renders amounts as strings."""
        expense = make_expense(amount=Decimal("12345678901234567.89"))
        data = json.loads(expense.model_dump_json(by_alias=True, context={EXACT_MONEY: True}))
        assert data["amount"] == "12345678901234567.89"

    def test_create_accepts_camel_case_input(self):
        """Test that ExpenseCreate accepts the dashboard's field names."""
        payload = ExpenseCreate.model_validate({
            "amount": "12.00",
            "description": "  Taxi  ",
            "date": "2024-03-01",
            "category": "Transport",
            "paymentMethod": "Cash",
        })
        assert payload.payment_method == "Cash"
        assert payload.description == "Taxi"

    def test_create_requires_all_fields(self):
        """Test that a missing field fails validation."""
        with pytest.raises(ValidationError):
            ExpenseCreate.model_validate({
                "amount": "12.00",
                "description": "Taxi",
                "date": "2024-03-01",
                "category": "Transport",
            })

    def test_create_to_expense_sets_owner(self):
        """Test that to_expense tags the payload with the user."""
        payload = ExpenseCreate(
            amount=Decimal("5"),
            description="Coffee",
            date=dt.date(2024, 2, 2),
            category="Food",
            payment_method="Card",
        )
        expense = payload.to_expense("user-9")
        assert expense.user_id == "user-9"
        assert expense.description == "Coffee"

    def test_update_changes_only_sent_fields(self):
        """Test that ExpenseUpdate reports only fields the client sent."""
        update = ExpenseUpdate.model_validate({"amount": "30", "paymentMethod": "Cash"})
        assert update.changes() == {"amount": Decimal("30"), "payment_method": "Cash"}

    def test_empty_update_has_no_changes(self):
        """Test that an empty body produces no changes."""
        assert ExpenseUpdate().changes() == {}


class TestQueryModels:
    """Tests for list query, filter and page models."""

    def test_query_defaults(self):
        """Test default page and limit."""
        query = ExpenseQuery()
        assert query.page == 1
        assert query.limit == 10
        assert query.skip == 0

    def test_query_skip(self):
        """Test that skip is (page - 1) * limit."""
        assert ExpenseQuery(page=3, limit=20).skip == 40

    def test_query_limit_has_no_fixed_ceiling(self):
        """Test that the page size ceiling is left to configuration."""
        assert ExpenseQuery(limit=500).limit == 500

    def test_query_rejects_inverted_range(self):
        """Test that endDate before startDate is rejected."""
        with pytest.raises(ValidationError, match="endDate cannot be before startDate"):
            ExpenseQuery(start_date=dt.date(2024, 2, 1), end_date=dt.date(2024, 1, 1))

    def test_canonical_json_is_stable(self):
        """Test that equal queries serialize identically regardless of input form."""
        a = ExpenseQuery(category="Food", page=2)
        b = ExpenseQuery.model_validate({"page": "2", "category": "Food"})
        assert a.canonical_json() == b.canonical_json()
        assert '"paymentMethod":null' in a.canonical_json()

    def test_canonical_json_differs_per_query(self):
        """Test that different pages produce different cache keys."""
        assert ExpenseQuery(page=1).canonical_json() != ExpenseQuery(page=2).canonical_json()

    def test_filter_matches_owner_only(self):
        """Test that a filter never matches another user's expense."""
        expense = make_expense(user_id="someone-else")
        assert not ExpenseFilter(user_id="user-1").matches(expense)

    def test_filter_date_bounds_are_inclusive(self):
        """Test inclusive start and end dates."""
        expense = make_expense(date=dt.date(2024, 1, 15))
        day = dt.date(2024, 1, 15)
        assert ExpenseFilter(user_id="user-1", start_date=day, end_date=day).matches(expense)
        assert not ExpenseFilter(
            user_id="user-1", start_date=dt.date(2024, 1, 16)
        ).matches(expense)

    def test_filter_single_bound(self):
        """Test that either date bound works on its own."""
        expense = make_expense(date=dt.date(2024, 1, 15))
        assert ExpenseFilter(user_id="user-1", end_date=dt.date(2024, 1, 31)).matches(expense)
        assert not ExpenseFilter(user_id="user-1", end_date=dt.date(2024, 1, 1)).matches(expense)

    def test_page_total_pages(self):
        """Test total_pages is the ceiling of total / limit."""
        assert ExpensePage.build([], total=21, page=1, limit=10).total_pages == 3
        assert ExpensePage.build([], total=20, page=1, limit=10).total_pages == 2
        assert ExpensePage.build([], total=0, page=1, limit=10).total_pages == 0


class TestImportModels:
    """Tests for import result models."""

    def test_row_error_message(self):
        """Test the user-facing row error format."""
        error = RowError(row=3, messages=["Invalid amount", "Category is required"])
        assert error.to_message() == "Row 3: Invalid amount, Category is required"

    def test_row_error_rejects_header_row(self):
        """Test that row numbers start at 2 (row 1 is the header)."""
        with pytest.raises(ValidationError):
            RowError(row=1, messages=["Invalid amount"])

    def test_import_result_properties(self):
        """Test succeeded / inserted_count / error_messages."""
        ok = ImportResult(inserted=[make_expense(), make_expense()], valid_count=2)
        assert ok.succeeded
        assert ok.inserted_count == 2

        failed = ImportResult(errors=[RowError(row=2, messages=["Invalid amount"])], valid_count=4)
        assert not failed.succeeded
        assert failed.error_messages == ["Row 2: Invalid amount"]

    def test_statistics_defaults_are_zero(self):
        """Test that empty statistics are all zero."""
        stats = ExpenseStatistics()
        assert stats.total_expenses == 0
        assert stats.expenses_by_category == {}


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            description="Test event",
        )
        assert event.event_id is not None
        assert event.severity == AuditSeverity.INFO

    def test_expense_created_builder(self):
        """Test AuditEventBuilder for a created expense."""
        event = AuditEventBuilder.expense_created("user-1", "exp-1", "20.50", "Food")
        assert event.event_type == AuditEventType.EXPENSE_CREATED
        assert event.entity_id == "exp-1"
        assert event.details["category"] == "Food"

    def test_rejected_import_keeps_bounded_errors(self):
        """Test that a huge error list is truncated in the audit record."""
        errors = [f"Row {n}: Invalid amount" for n in range(2, 60)]
        event = AuditEventBuilder.bulk_import_rejected("user-1", errors, valid_count=0)
        assert event.severity == AuditSeverity.WARNING
        assert len(event.details["errors"]) == 20
        assert event.details["error_count"] == len(errors)

    def test_to_sheets_row(self):
        """Test conversion to a sheet row."""
        event = AuditEventBuilder.bulk_delete("user-1", requested=3, deleted=2)
        row = event.to_sheets_row()
        assert len(row) == 9
        assert row[2] == "bulk_delete"
        assert row[4] == "user-1"

    def test_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.system_error("StorageError", "Sheet unavailable")
        log_dict = event.to_log_dict()
        assert log_dict["severity"] == "error"
        assert log_dict["error_message"] == "Sheet unavailable"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
