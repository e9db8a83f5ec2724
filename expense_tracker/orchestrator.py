"""
Main Orchestrator for the Expense Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Single-record writes (create, update, delete)
2. Paginated listing through the per-user cache
3. Bulk import/delete and CSV export
4. Statistics and summary

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every operation is scoped to the calling user
- Every successful write invalidates that user's cached lists
- Every write is audited

Cache and audit failures are recorded but never fail the request; the
store is the source of truth.
"""

import datetime as dt
from dataclasses import dataclass
from typing import Optional

import structlog

from expense_tracker.audit import AuditLogger, configure_logging
from expense_tracker.bulk import ExpenseExporter, ExpenseImporter, render_csv
from expense_tracker.config import Settings, get_settings
from expense_tracker.errors import BadRequestError, ExpenseNotFoundError
from expense_tracker.models.expense import (
    BulkDeleteResult,
    Expense,
    ExpenseCreate,
    ExpensePage,
    ExpenseQuery,
    ExpenseStatistics,
    ExpenseSummary,
    ExpenseUpdate,
    ImportResult,
)
from expense_tracker.queries import ExpenseAggregator
from expense_tracker.services.cache import ExpenseCacheManager, InMemoryCache
from expense_tracker.services.storage import (
    AuditStorageInterface,
    ExpenseStorageInterface,
    InMemoryAuditStorage,
    InMemoryExpenseStorage,
)


logger = structlog.get_logger(__name__)


class ExpenseService:
    """
    Orchestrates every expense operation for the API.

    All collaborators are injected; the service holds no global handles.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        cache: Optional[ExpenseCacheManager] = None,
        audit_logger: Optional[AuditLogger] = None,
        importer: Optional[ExpenseImporter] = None,
        exporter: Optional[ExpenseExporter] = None,
        aggregator: Optional[ExpenseAggregator] = None,
    ):
        self._storage = storage
        self._cache = cache
        self._audit_logger = audit_logger or AuditLogger()
        self._importer = importer or ExpenseImporter(storage, cache)
        self._exporter = exporter or ExpenseExporter(storage)
        self._aggregator = aggregator or ExpenseAggregator(storage)

    async def _invalidate(self, user_id: str) -> None:
        """Drop the user's cached lists after a write."""
        if self._cache is None:
            return
        if not await self._cache.invalidate_user(user_id):
            await self._audit_logger.log_cache_invalidation_failed(
                user_id, "cache backend rejected invalidation"
            )

    # =========================================================================
    # SINGLE RECORD
    # =========================================================================

    async def create_expense(self, user_id: str, payload: ExpenseCreate) -> Expense:
        expense = await self._storage.insert_expense(payload.to_expense(user_id))
        await self._invalidate(user_id)
        await self._audit_logger.log_expense_created(
            user_id, expense.id, str(expense.amount), expense.category
        )
        return expense

    async def update_expense(
        self,
        user_id: str,
        expense_id: str,
        update: ExpenseUpdate,
    ) -> Expense:
        """
        Apply a partial update to one of the user's expenses.

        Raises:
            BadRequestError: No fields were supplied
            ExpenseNotFoundError: No such expense for this user
        """
        changes = update.changes()
        if not changes:
            raise BadRequestError("At least one field is required to update")

        expense = await self._storage.update_expense(user_id, expense_id, changes)
        if expense is None:
            raise ExpenseNotFoundError()

        await self._invalidate(user_id)
        await self._audit_logger.log_expense_updated(user_id, expense_id, sorted(changes))
        return expense

    async def delete_expense(self, user_id: str, expense_id: str) -> Expense:
        expense = await self._storage.delete_expense(user_id, expense_id)
        if expense is None:
            raise ExpenseNotFoundError()

        await self._invalidate(user_id)
        await self._audit_logger.log_expense_deleted(user_id, expense_id)
        return expense

    # =========================================================================
    # LISTING
    # =========================================================================

    async def list_expenses(
        self,
        user_id: str,
        query: ExpenseQuery,
    ) -> tuple[ExpensePage, bool]:
        """
        Return one page of the user's expenses, newest first.

        Returns:
            (page, from_cache)
        """
        if self._cache is not None:
            cached = await self._cache.get_page(user_id, query)
            if cached is not None:
                return cached, True

        expense_filter = query.to_filter(user_id)
        expenses = await self._storage.find_expenses(
            expense_filter, skip=query.skip, limit=query.limit
        )
        total = await self._storage.count_expenses(expense_filter)
        page = ExpensePage.build(expenses, total, query.page, query.limit)

        if self._cache is not None:
            await self._cache.store_page(user_id, query, page)

        return page, False

    # =========================================================================
    # BULK OPERATIONS
    # =========================================================================

    async def bulk_import(self, user_id: str, csv_text: str) -> ImportResult:
        """
        Import a CSV file. All-or-nothing at validation.

        Returns:
            ImportResult; when result.succeeded is False nothing was stored

        Raises:
            NoValidRecordsError: The file had no data rows
            BadRequestError: The file is not parseable CSV
        """
        result = await self._importer.import_csv(user_id, csv_text)

        if not result.succeeded:
            await self._audit_logger.log_bulk_import_rejected(
                user_id, result.error_messages, result.valid_count
            )
            return result

        if not result.cache_invalidated:
            await self._audit_logger.log_cache_invalidation_failed(
                user_id, "cache backend rejected invalidation after import"
            )
        await self._audit_logger.log_bulk_import_accepted(user_id, result.inserted_count)
        return result

    async def bulk_delete(self, user_id: str, ids: list) -> BulkDeleteResult:
        """
        Delete several of the user's expenses.

        Ids that don't exist or belong to someone else are skipped.

        Raises:
            BadRequestError: ids is empty or holds a non-string/blank entry
        """
        if not isinstance(ids, list) or not ids or not all(
            isinstance(expense_id, str) and expense_id.strip() for expense_id in ids
        ):
            raise BadRequestError("Valid expense IDs are required")

        deleted = await self._storage.delete_expenses(user_id, ids)

        await self._invalidate(user_id)
        await self._audit_logger.log_bulk_delete(user_id, len(ids), deleted)
        return BulkDeleteResult(deleted_count=deleted)

    async def export_csv(self, user_id: str, import_date_format: bool = False) -> str:
        expenses = await self._exporter.load(user_id)
        await self._audit_logger.log_export_generated(user_id, len(expenses))
        return render_csv(expenses, import_date_format)

    # =========================================================================
    # AGGREGATES
    # =========================================================================

    async def statistics(
        self,
        user_id: str,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
    ) -> ExpenseStatistics:
        return await self._aggregator.statistics(user_id, start_date, end_date)

    async def summary(self, user_id: str) -> ExpenseSummary:
        return await self._aggregator.summary(user_id)


@dataclass
class AppComponents:
    """Everything the API needs, built once at startup."""

    settings: Settings
    service: ExpenseService
    storage: ExpenseStorageInterface
    audit_storage: AuditStorageInterface
    audit_logger: AuditLogger


def create_app_components(settings: Optional[Settings] = None) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from (default: get_settings())

    Returns:
        AppComponents wired for the configured storage backend
    """
    settings = settings or get_settings()
    configure_logging(settings.app.log_level)

    if settings.app.storage_backend == "google_sheets":
        # Imported lazily so the memory backend doesn't need Google credentials
        from expense_tracker.services.storage.google_sheets import (
            GoogleSheetsAuditStorage,
            GoogleSheetsClient,
            GoogleSheetsExpenseStorage,
        )

        sheets_client = GoogleSheetsClient(settings.google_sheets)
        storage = GoogleSheetsExpenseStorage(sheets_client)
        audit_storage = GoogleSheetsAuditStorage(sheets_client)
    else:
        storage = InMemoryExpenseStorage()
        audit_storage = InMemoryAuditStorage()

    cache = ExpenseCacheManager(
        InMemoryCache(),
        ttl_seconds=settings.cache.ttl_seconds,
        key_prefix=settings.cache.key_prefix,
    )

    audit_logger = AuditLogger(audit_storage)
    service = ExpenseService(
        storage=storage,
        cache=cache,
        audit_logger=audit_logger,
    )

    logger.info(
        "app_components_created",
        storage_backend=settings.app.storage_backend,
        environment=settings.app.app_environment,
    )
    return AppComponents(
        settings=settings,
        service=service,
        storage=storage,
        audit_storage=audit_storage,
        audit_logger=audit_logger,
    )
