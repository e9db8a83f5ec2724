"""
Tests for CSV row validation.
"""

import datetime as dt
from decimal import Decimal

import pytest

from expense_tracker.validation import (
    ExpenseRowValidator,
    format_import_date,
    is_blank_row,
    parse_amount,
    parse_import_date,
)


def make_row(**overrides) -> dict:
    row = {
        "amount": "20.50",
        "description": "Lunch",
        "date": "1/15/2024",
        "category": "Food",
        "paymentMethod": "Card",
    }
    row.update(overrides)
    return row


class TestDateParsing:
    """Tests for M/D/YYYY date parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("1/15/2024", dt.date(2024, 1, 15)),
        ("01/05/2024", dt.date(2024, 1, 5)),
        ("12/31/1999", dt.date(1999, 12, 31)),
        (" 2/29/2024 ", dt.date(2024, 2, 29)),
    ])
    def test_valid_dates(self, value, expected):
        """Test accepted date spellings."""
        assert parse_import_date(value) == expected

    @pytest.mark.parametrize("value", [
        "2024-01-15",
        "15/1/2024",
        "2/30/2024",
        "2/29/2023",
        "1/15/24",
        "13/1/2024",
        "",
        "yesterday",
    ])
    def test_invalid_dates(self, value):
        """Test rejected formats and impossible calendar dates."""
        assert parse_import_date(value) is None

    def test_format_import_date(self):
        """Test that export formatting is unpadded M/D/YYYY."""
        assert format_import_date(dt.date(2024, 2, 5)) == "2/5/2024"


class TestAmountParsing:
    """Tests for amount parsing."""

    def test_decimal_amount(self):
        """Test that amounts keep their exact decimal value."""
        assert parse_amount("20.10") == Decimal("20.10")

    @pytest.mark.parametrize("value", ["abc", "", "NaN", "Infinity", "1,000"])
    def test_non_numeric_amounts(self, value):
        """Test that non-finite or non-numeric values are rejected."""
        assert parse_amount(value) is None


class TestBlankRows:
    """Tests for blank-row detection."""

    def test_all_empty_is_blank(self):
        """Test a row of empty and whitespace cells."""
        assert is_blank_row({"amount": "", "description": "  ", "date": None})

    def test_any_value_is_not_blank(self):
        """Test a row with one non-empty cell."""
        assert not is_blank_row({"amount": "", "description": "x"})


class TestExpenseRowValidator:
    """Tests for whole-row validation."""

    def setup_method(self):
        self.validator = ExpenseRowValidator()

    def test_valid_row(self):
        """Test conversion of a valid row."""
        record, errors = self.validator.validate(make_row())
        assert errors == []
        assert record.amount == Decimal("20.50")
        assert record.date == dt.date(2024, 1, 15)
        assert record.payment_method == "Card"

    def test_values_are_trimmed(self):
        """Test that surrounding whitespace is removed."""
        record, errors = self.validator.validate(make_row(description="  Lunch  ", category=" Food "))
        assert errors == []
        assert record.description == "Lunch"
        assert record.category == "Food"

    def test_iso_date_is_rejected(self):
        """Test that the importer only accepts M/D/YYYY."""
        record, errors = self.validator.validate(make_row(date="2024-01-15"))
        assert record is None
        assert errors == ["Invalid date format. Use M/D/YYYY"]

    def test_invalid_amount(self):
        """Test a non-numeric amount."""
        _, errors = self.validator.validate(make_row(amount="abc"))
        assert errors == ["Invalid amount"]

    def test_zero_amount(self):
        """Test that a zero amount is rejected."""
        _, errors = self.validator.validate(make_row(amount="0"))
        assert errors == ["Amount must be greater than zero"]

    def test_every_error_reported_in_order(self):
        """Test that all failing rules are reported, date first."""
        row = {"amount": "x", "description": "", "date": "bad", "category": " ", "paymentMethod": ""}
        _, errors = self.validator.validate(row)
        assert errors == [
            "Invalid date format. Use M/D/YYYY",
            "Invalid amount",
            "Description is required",
            "Category is required",
            "Payment method is required",
        ]

    def test_missing_columns_are_required_errors(self):
        """Test a row missing columns entirely (short line or missing header)."""
        _, errors = self.validator.validate({"amount": "10", "date": "1/1/2024"})
        assert errors == [
            "Description is required",
            "Category is required",
            "Payment method is required",
        ]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
