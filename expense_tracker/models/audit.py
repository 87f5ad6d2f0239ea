"""
Audit Models for the Expense Tracker

Every store round trip and every snapshot the page applies is recorded
as an AuditEvent. Events go to the structured log; they are never
written to the item store.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Draft handling
    DRAFT_REJECTED = "draft_rejected"

    # Create
    ITEM_CREATE_REQUESTED = "item_create_requested"
    ITEM_CREATED = "item_created"
    ITEM_CREATE_FAILED = "item_create_failed"

    # Delete
    ITEM_DELETE_REQUESTED = "item_delete_requested"
    ITEM_DELETED = "item_deleted"
    ITEM_DELETE_FAILED = "item_delete_failed"

    # Live subscription
    SUBSCRIPTION_OPENED = "subscription_opened"
    SUBSCRIPTION_CLOSED = "subscription_closed"
    SNAPSHOT_APPLIED = "snapshot_applied"
    SNAPSHOT_DISCARDED = "snapshot_discarded"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Store-assigned item id, when the event is about one item
    item_id: Optional[str] = None

    # One correlation id per page session
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "item_id": self.item_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.item_created(
            item_id="a1b2c3",
            name="Coffee",
            price=3.5,
            correlation_id=session_id,
        )
    """

    @staticmethod
    def draft_rejected(
        field: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAFT_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Draft rejected on field '{field}'",
            details={"field": field},
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def item_create_requested(
        name: str,
        price: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_CREATE_REQUESTED,
            correlation_id=correlation_id,
            description=f"Create requested for '{name}'",
            details={"name": name, "price": price},
            is_user_action=True,
        )

    @staticmethod
    def item_created(
        item_id: str,
        name: str,
        price: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_CREATED,
            item_id=item_id,
            correlation_id=correlation_id,
            description=f"Item '{name}' created",
            details={"name": name, "price": price},
        )

    @staticmethod
    def item_create_failed(
        name: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_CREATE_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"Create failed for '{name}'",
            details={"name": name},
            error_message=error_message,
        )

    @staticmethod
    def item_delete_requested(
        item_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_DELETE_REQUESTED,
            item_id=item_id,
            correlation_id=correlation_id,
            description=f"Delete requested for item {item_id}",
            is_user_action=True,
        )

    @staticmethod
    def item_deleted(
        item_id: str,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_DELETED,
            item_id=item_id,
            correlation_id=correlation_id,
            description=f"Item {item_id} deleted",
            details={"found": found},
        )

    @staticmethod
    def item_delete_failed(
        item_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ITEM_DELETE_FAILED,
            severity=AuditSeverity.ERROR,
            item_id=item_id,
            correlation_id=correlation_id,
            description=f"Delete failed for item {item_id}",
            error_message=error_message,
        )

    @staticmethod
    def subscription_opened(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_OPENED,
            correlation_id=correlation_id,
            description="Live subscription opened",
        )

    @staticmethod
    def subscription_closed(
        discarded: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_CLOSED,
            correlation_id=correlation_id,
            description="Live subscription closed",
            details={"discarded_snapshots": discarded},
        )

    @staticmethod
    def snapshot_applied(
        item_count: int,
        total: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_APPLIED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Snapshot applied with {item_count} items",
            details={"item_count": item_count, "total": total},
        )

    @staticmethod
    def snapshot_discarded(
        skipped: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        """Older snapshots superseded by a newer one in the same poll."""
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_DISCARDED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"{skipped} superseded snapshots skipped",
            details={"skipped": skipped},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"System error: {error_type}",
            details=details or {},
            error_message=error_message,
        )
