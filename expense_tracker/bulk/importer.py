"""
CSV Bulk Import

DESIGN DECISION: Imports are ALL-OR-NOTHING at the validation gate.
If any row fails validation, nothing is written; the user gets every
row error plus the number of rows that would have been accepted, and
re-uploads a corrected file.

Flow:
1. Parse the payload (header row supplies the column names)
2. Drop structurally empty rows (every cell blank)
3. Validate every remaining row, in order
4. Any errors -> return them, no writes
5. No errors -> one batch insert, then invalidate the user's cache

KNOWN LIMITATION: the batch insert itself is not transactional. If the
store fails partway through, rows written before the failure stay
written and the error propagates. Callers cannot tell which rows landed.
"""

import csv
import io
from typing import Optional

import structlog

from expense_tracker.errors import BadRequestError, NoValidRecordsError
from expense_tracker.models.expense import Expense, ImportResult, RowError
from expense_tracker.services.cache import ExpenseCacheManager
from expense_tracker.services.storage import ExpenseStorageInterface
from expense_tracker.validation import ExpenseRowValidator, is_blank_row


logger = structlog.get_logger(__name__)

# The header is row 1; the first data row is row 2
FIRST_DATA_ROW = 2


def decode_payload(data: bytes) -> str:
    """Decode an uploaded file as UTF-8, dropping a leading BOM."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise BadRequestError("CSV file must be UTF-8 encoded")


def parse_rows(csv_text: str) -> list[dict[str, Optional[str]]]:
    """
    Parse CSV text into one dict per non-blank data row.

    Header names are trimmed. Missing trailing cells read as None,
    cells beyond the header are ignored.
    """
    reader = csv.DictReader(io.StringIO(csv_text.lstrip("\ufeff")))
    try:
        if reader.fieldnames is None:
            return []
        reader.fieldnames = [name.strip() for name in reader.fieldnames]
        rows = []
        for row in reader:
            row.pop(None, None)
            if not is_blank_row(row):
                rows.append(row)
        return rows
    except csv.Error as e:
        raise BadRequestError(f"Malformed CSV: {e}")


class ExpenseImporter:
    """Validates and stores a CSV batch for one user."""

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        cache: Optional[ExpenseCacheManager] = None,
        validator: Optional[ExpenseRowValidator] = None,
    ):
        self._storage = storage
        self._cache = cache
        self._validator = validator or ExpenseRowValidator()

    def validate_rows(
        self,
        rows: list[dict[str, Optional[str]]],
        user_id: str,
    ) -> tuple[list[Expense], list[RowError]]:
        """
        Run every row through the validator.

        Returns:
            (valid expenses tagged with user_id, row errors)
        """
        valid: list[Expense] = []
        errors: list[RowError] = []

        for index, row in enumerate(rows):
            record, messages = self._validator.validate(row)
            if messages:
                errors.append(RowError(row=index + FIRST_DATA_ROW, messages=messages))
            else:
                valid.append(record.to_expense(user_id))

        return valid, errors

    async def import_csv(self, user_id: str, csv_text: str) -> ImportResult:
        """
        Import a CSV payload for a user.

        Returns:
            ImportResult with either errors (nothing written) or the
            inserted expenses

        Raises:
            NoValidRecordsError: The file has no data rows at all
            BadRequestError: The file is not parseable CSV
            StorageError: The batch insert failed (possibly partially)
        """
        rows = parse_rows(csv_text)
        valid, errors = self.validate_rows(rows, user_id)

        if errors:
            logger.info(
                "bulk_import_rejected",
                user_id=user_id,
                error_count=len(errors),
                valid_count=len(valid),
            )
            return ImportResult(errors=errors, valid_count=len(valid))

        if not valid:
            raise NoValidRecordsError()

        inserted = await self._storage.insert_expenses(valid)

        cache_invalidated = True
        if self._cache is not None:
            cache_invalidated = await self._cache.invalidate_user(user_id)

        logger.info("bulk_import_stored", user_id=user_id, inserted=len(inserted))
        return ImportResult(
            inserted=inserted,
            valid_count=len(valid),
            cache_invalidated=cache_invalidated,
        )
