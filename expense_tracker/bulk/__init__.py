"""CSV bulk import/export package."""

from expense_tracker.bulk.exporter import ExpenseExporter, render_csv
from expense_tracker.bulk.importer import (
    ExpenseImporter,
    decode_payload,
    parse_rows,
)

__all__ = [
    "ExpenseExporter",
    "ExpenseImporter",
    "decode_payload",
    "parse_rows",
    "render_csv",
]
