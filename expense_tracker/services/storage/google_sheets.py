"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets can act as the persistent document store
for a single household because:
1. Users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (a batch insert is one append call, but an update
  that races a delete can target a shifted row)
- Limited query capabilities (we filter in Python)

The implementation follows the abstract interface, so we can swap
to a real document database later without changing business logic.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from expense_tracker.config import GoogleSheetsSettings, get_settings
from expense_tracker.models.audit import AuditEvent, AuditEventType, AuditSeverity
from expense_tracker.models.expense import Expense, ExpenseFilter
from expense_tracker.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    ExpenseStorageInterface,
    StorageError,
    apply_changes,
    sort_key,
)


# Column mappings for Expenses sheet
EXPENSE_COLUMNS = [
    "id",
    "user_id",
    "amount",
    "description",
    "date",
    "category",
    "payment_method",
    "created_at",
    "updated_at",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "user_id",
    "entity_id",
    "description",
    "details_json",
    "error_message",
]


def _last_column(columns: list[str]) -> str:
    return chr(ord("A") + len(columns) - 1)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(self, title: str, columns: list[str], rows: int) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_expenses_sheet(self) -> gspread.Worksheet:
        """Get or create the Expenses worksheet."""
        return self._get_or_create_sheet(
            self._settings.expenses_sheet_name, EXPENSE_COLUMNS, rows=1000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


class GoogleSheetsExpenseStorage(ExpenseStorageInterface):
    """
    Google Sheets implementation of expense storage.

    Expenses are stored as rows in a single worksheet, one expense per
    row, for every user. Ownership is enforced here on every read and write.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _expense_to_row(self, expense: Expense) -> list:
        """Convert an Expense to a spreadsheet row."""
        return [
            expense.id,
            expense.user_id,
            str(expense.amount),
            expense.description,
            expense.date.isoformat(),
            expense.category,
            expense.payment_method,
            expense.created_at.isoformat(),
            expense.updated_at.isoformat(),
        ]

    def _row_to_expense(self, row: list) -> Expense:
        """Convert a spreadsheet row to an Expense."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return Expense(
            id=safe_get(0),
            user_id=safe_get(1),
            amount=Decimal(safe_get(2)),
            description=safe_get(3),
            date=date.fromisoformat(safe_get(4)),
            category=safe_get(5),
            payment_method=safe_get(6),
            created_at=datetime.fromisoformat(safe_get(7)),
            updated_at=datetime.fromisoformat(safe_get(8)),
        )

    def _load_rows(self) -> list[tuple[int, Expense]]:
        """All parseable rows as (sheet row number, expense)."""
        sheet = self._client.get_expenses_sheet()
        loaded = []
        # Start from 2 (row 1 is header)
        for idx, row in enumerate(sheet.get_all_values()[1:], start=2):
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                loaded.append((idx, self._row_to_expense(row)))
            except Exception:
                continue  # Skip malformed rows
        return loaded

    def _locate(self, user_id: str, expense_id: str) -> Optional[tuple[int, Expense]]:
        for idx, expense in self._load_rows():
            if expense.id == expense_id:
                return (idx, expense) if expense.user_id == user_id else None
        return None

    async def find_expenses(
        self,
        expense_filter: ExpenseFilter,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[Expense]:
        """List expenses with filters, newest first."""
        try:
            matches = [e for _, e in self._load_rows() if expense_filter.matches(e)]
        except Exception as e:
            raise StorageError(f"Failed to list expenses: {e}")

        matches.sort(key=sort_key, reverse=True)
        end = None if limit is None else skip + limit
        return matches[skip:end]

    async def count_expenses(self, expense_filter: ExpenseFilter) -> int:
        try:
            return sum(1 for _, e in self._load_rows() if expense_filter.matches(e))
        except Exception as e:
            raise StorageError(f"Failed to count expenses: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def insert_expense(self, expense: Expense) -> Expense:
        """Append a single expense row."""
        try:
            sheet = self._client.get_expenses_sheet()
            sheet.append_row(self._expense_to_row(expense), value_input_option="RAW")
            return expense
        except Exception as e:
            raise StorageError(f"Failed to save expense: {e}")

    async def insert_expenses(self, expenses: list[Expense]) -> list[Expense]:
        """
        Append all rows in one API call.

        Not retried: a timed-out append may still have been applied,
        and retrying it would duplicate the batch.
        """
        if not expenses:
            return []
        try:
            sheet = self._client.get_expenses_sheet()
            sheet.append_rows(
                [self._expense_to_row(e) for e in expenses],
                value_input_option="RAW",
            )
            return expenses
        except Exception as e:
            raise StorageError(f"Failed to save expenses: {e}")

    async def update_expense(
        self,
        user_id: str,
        expense_id: str,
        changes: dict,
    ) -> Optional[Expense]:
        """Rewrite the expense's row with the changes applied."""
        try:
            located = self._locate(user_id, expense_id)
            if located is None:
                return None
            idx, current = located
            updated = apply_changes(current, changes)
            sheet = self._client.get_expenses_sheet()
            sheet.batch_update([{
                "range": f"A{idx}:{_last_column(EXPENSE_COLUMNS)}{idx}",
                "values": [self._expense_to_row(updated)],
            }])
            return updated
        except Exception as e:
            raise StorageError(f"Failed to update expense: {e}")

    async def delete_expense(
        self,
        user_id: str,
        expense_id: str,
    ) -> Optional[Expense]:
        """Delete the expense's row."""
        try:
            located = self._locate(user_id, expense_id)
            if located is None:
                return None
            idx, expense = located
            self._client.get_expenses_sheet().delete_rows(idx)
            return expense
        except Exception as e:
            raise StorageError(f"Failed to delete expense: {e}")

    async def delete_expenses(
        self,
        user_id: str,
        expense_ids: list[str],
    ) -> int:
        """Delete every matching row, bottom-up so row numbers stay valid."""
        wanted = set(expense_ids)
        try:
            targets = [
                idx for idx, e in self._load_rows()
                if e.id in wanted and e.user_id == user_id
            ]
            sheet = self._client.get_expenses_sheet()
            for idx in sorted(targets, reverse=True):
                sheet.delete_rows(idx)
            return len(targets)
        except Exception as e:
            raise StorageError(f"Failed to delete expenses: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            user_id=safe_get(4) or None,
            entity_id=safe_get(5) or None,
            description=safe_get(6),
            details=json.loads(safe_get(7)) if safe_get(7) else {},
            error_message=safe_get(8) or None,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    async def get_recent_events(
        self,
        limit: int = 100,
        user_id: Optional[str] = None,
    ) -> list[AuditEvent]:
        """Get recent events."""
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]

            events = []
            for row in all_rows:
                if not row or not row[0]:
                    continue
                if user_id is not None and (len(row) < 5 or row[4] != user_id):
                    continue
                try:
                    events.append(self._row_to_event(row))
                except Exception:
                    continue

            # Sort newest first
            events.sort(key=lambda e: e.timestamp, reverse=True)
            return events[:limit]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
