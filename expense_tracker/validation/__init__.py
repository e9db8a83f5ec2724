"""Row validation package."""

from expense_tracker.validation.validator import (
    CSV_COLUMNS,
    IMPORT_DATE_FORMAT,
    ExpenseRowValidator,
    format_import_date,
    is_blank_row,
    parse_amount,
    parse_import_date,
)

__all__ = [
    "CSV_COLUMNS",
    "IMPORT_DATE_FORMAT",
    "ExpenseRowValidator",
    "format_import_date",
    "is_blank_row",
    "parse_amount",
    "parse_import_date",
]
