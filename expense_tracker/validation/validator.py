"""
CSV Row Validation

DESIGN DECISION: Every rule is checked on every row.
A row with three problems reports three messages, so the user can fix
the whole file in one pass instead of discovering errors one re-upload
at a time.

RULES:
- date: M/D/YYYY (no zero padding needed, 4-digit year, real calendar date)
- amount: a finite decimal number greater than zero
- description, category, paymentMethod: present and not blank

Messages are reported in the order above (date first), matching the
wording users already see in the upload instructions.

IMPORTANT: Validation NEVER silently fixes issues beyond trimming
surrounding whitespace. It reports them for the user to correct.
"""

import datetime as dt
import re
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from expense_tracker.models.expense import ExpenseCreate


IMPORT_DATE_FORMAT = "M/D/YYYY"

_IMPORT_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

# Column names as they appear in the CSV header
AMOUNT = "amount"
DESCRIPTION = "description"
DATE = "date"
CATEGORY = "category"
PAYMENT_METHOD = "paymentMethod"

CSV_COLUMNS = [AMOUNT, DESCRIPTION, DATE, CATEGORY, PAYMENT_METHOD]


def _clean(row: Mapping[str, Optional[str]], column: str) -> str:
    value = row.get(column)
    return value.strip() if isinstance(value, str) else ""


def is_blank_row(row: Mapping[str, Optional[str]]) -> bool:
    """True if every cell is empty after trimming (spreadsheet padding)."""
    return all(
        not (value.strip() if isinstance(value, str) else value)
        for value in row.values()
    )


def parse_import_date(value: str) -> Optional[dt.date]:
    """Parse M/D/YYYY. Returns None for bad format or impossible dates."""
    match = _IMPORT_DATE_RE.match(value.strip())
    if not match:
        return None
    month, day, year = (int(part) for part in match.groups())
    try:
        return dt.date(year, month, day)
    except ValueError:
        return None


def format_import_date(value: dt.date) -> str:
    """Render a date the way the importer reads it."""
    return f"{value.month}/{value.day}/{value.year:04d}"


def parse_amount(value: str) -> Optional[Decimal]:
    """Parse a decimal number. Returns None if it isn't a finite number."""
    try:
        amount = Decimal(value.strip())
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


class ExpenseRowValidator:
    """
    Validates one CSV row and converts it to an ExpenseCreate.

    Stateless; a single instance can be shared across imports.
    """

    def validate(
        self,
        row: Mapping[str, Optional[str]],
    ) -> tuple[Optional[ExpenseCreate], list[str]]:
        """
        Validate a row of raw cell values keyed by column name.

        Returns:
            (record, []) if the row is valid
            (None, messages) otherwise, one message per failing rule
        """
        errors = []

        expense_date = parse_import_date(_clean(row, DATE))
        if expense_date is None:
            errors.append(f"Invalid date format. Use {IMPORT_DATE_FORMAT}")

        amount = parse_amount(_clean(row, AMOUNT))
        if amount is None:
            errors.append("Invalid amount")
        elif amount <= 0:
            errors.append("Amount must be greater than zero")

        description = _clean(row, DESCRIPTION)
        if not description:
            errors.append("Description is required")

        category = _clean(row, CATEGORY)
        if not category:
            errors.append("Category is required")

        payment_method = _clean(row, PAYMENT_METHOD)
        if not payment_method:
            errors.append("Payment method is required")

        if errors:
            return None, errors

        return ExpenseCreate(
            amount=amount,
            description=description,
            date=expense_date,
            category=category,
            payment_method=payment_method,
        ), []
