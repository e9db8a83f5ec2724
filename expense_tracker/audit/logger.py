"""
Audit Logger

DESIGN DECISION: Every write to a user's expenses is logged.
This provides:
1. Traceability of who changed what
2. Debugging capability for rejected imports
3. A record of cache invalidation failures (possible stale list reads)

The audit logger:
- Always logs locally through structlog
- Persists to audit storage when one is configured
- Never raises: a failed audit write must not fail the user's request
"""

import logging
from typing import Optional

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from expense_tracker.services.storage import AuditStorageInterface


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog (JSON lines on stdout) and the stdlib root level."""
    logging.basicConfig(format="%(message)s", level=level.upper())
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), if configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("expense_tracker.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_expense_created(self, user_id: str, expense_id: str, amount: str, category: str) -> None:
        await self.log(AuditEventBuilder.expense_created(user_id, expense_id, amount, category))

    async def log_expense_updated(self, user_id: str, expense_id: str, fields: list[str]) -> None:
        await self.log(AuditEventBuilder.expense_updated(user_id, expense_id, fields))

    async def log_expense_deleted(self, user_id: str, expense_id: str) -> None:
        await self.log(AuditEventBuilder.expense_deleted(user_id, expense_id))

    async def log_bulk_import_accepted(self, user_id: str, inserted_count: int) -> None:
        await self.log(AuditEventBuilder.bulk_import_accepted(user_id, inserted_count))

    async def log_bulk_import_rejected(
        self,
        user_id: str,
        errors: list[str],
        valid_count: int,
    ) -> None:
        """Log an import that failed validation (nothing was stored)."""
        await self.log(AuditEventBuilder.bulk_import_rejected(user_id, errors, valid_count))

    async def log_bulk_delete(self, user_id: str, requested: int, deleted: int) -> None:
        await self.log(AuditEventBuilder.bulk_delete(user_id, requested, deleted))

    async def log_export_generated(self, user_id: str, row_count: int) -> None:
        await self.log(AuditEventBuilder.export_generated(user_id, row_count))

    async def log_cache_invalidation_failed(self, user_id: str, error_message: str) -> None:
        """Log that a write succeeded but cached lists may now be stale."""
        await self.log(AuditEventBuilder.cache_invalidation_failed(user_id, error_message))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        user_id: Optional[str] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            user_id=user_id,
        )
        await self.log(event)
