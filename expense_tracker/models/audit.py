"""
Audit Models for Expense Tracker

Every write to a user's expenses is logged for audit purposes.
This provides:
1. Complete traceability of all operations
2. Debugging information when things go wrong
3. Ability to reconstruct who changed what and when

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every write path has its own event type.
    """
    # Single-record writes
    EXPENSE_CREATED = "expense_created"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Bulk operations
    BULK_IMPORT_ACCEPTED = "bulk_import_accepted"
    BULK_IMPORT_REJECTED = "bulk_import_rejected"
    BULK_DELETE = "bulk_delete"
    EXPORT_GENERATED = "export_generated"

    # Cache
    CACHE_INVALIDATION_FAILED = "cache_invalidation_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every write creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who and what
    user_id: Optional[str] = Field(
        default=None,
        description="User whose expenses were affected"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Expense ID this event relates to, if a single record"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, user_id, entity_id,
         description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.user_id or "",
            self.entity_id or "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_created(user_id, expense_id, amount)
        event = AuditEventBuilder.bulk_import_rejected(user_id, errors, valid_count)
    """

    @staticmethod
    def expense_created(
        user_id: str,
        expense_id: str,
        amount: str,
        category: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            user_id=user_id,
            entity_id=expense_id,
            description=f"Expense created: {category} - {amount}",
            details={
                "amount": amount,
                "category": category,
            },
        )

    @staticmethod
    def expense_updated(
        user_id: str,
        expense_id: str,
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            user_id=user_id,
            entity_id=expense_id,
            description=f"Expense updated: {', '.join(fields)}",
            details={
                "fields": fields,
            },
        )

    @staticmethod
    def expense_deleted(
        user_id: str,
        expense_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            user_id=user_id,
            entity_id=expense_id,
            description="Expense deleted",
        )

    @staticmethod
    def bulk_import_accepted(
        user_id: str,
        inserted_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BULK_IMPORT_ACCEPTED,
            user_id=user_id,
            description=f"Bulk import stored {inserted_count} expenses",
            details={
                "inserted_count": inserted_count,
            },
        )

    @staticmethod
    def bulk_import_rejected(
        user_id: str,
        errors: list[str],
        valid_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BULK_IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            description=f"Bulk import rejected with {len(errors)} row errors",
            details={
                # Keep the audit row bounded for very bad files
                "errors": errors[:20],
                "error_count": len(errors),
                "valid_count": valid_count,
            },
        )

    @staticmethod
    def bulk_delete(
        user_id: str,
        requested: int,
        deleted: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BULK_DELETE,
            user_id=user_id,
            description=f"Bulk delete removed {deleted} of {requested} expenses",
            details={
                "requested_count": requested,
                "deleted_count": deleted,
            },
        )

    @staticmethod
    def export_generated(
        user_id: str,
        row_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_GENERATED,
            user_id=user_id,
            description=f"Exported {row_count} expenses",
            details={
                "row_count": row_count,
            },
        )

    @staticmethod
    def cache_invalidation_failed(
        user_id: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CACHE_INVALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            description="Cached expense lists could not be invalidated",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
