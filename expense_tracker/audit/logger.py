"""
Audit Logger

Every store round trip the page makes is logged as a structured event.
This provides:
1. Traceability of what the user asked the store to do
2. Visibility of store failures the page surfaced to the user
3. A record of each snapshot the view applied

Events are correlated per page session, so one browser tab's activity
can be followed through the log.
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
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


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and so structlog) to stderr at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """Central audit logging service for one page session."""

    def __init__(self, correlation_id: Optional[UUID] = None):
        self._correlation_id = correlation_id or create_correlation_id()
        self._logger = structlog.get_logger("expense_tracker.audit")

    @property
    def correlation_id(self) -> UUID:
        return self._correlation_id

    def log(self, event: AuditEvent) -> None:
        """Write an audit event to the structured log."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_draft_rejected(self, field: str, reason: str) -> None:
        self.log(AuditEventBuilder.draft_rejected(
            field=field,
            reason=reason,
            correlation_id=self._correlation_id,
        ))

    def log_create_requested(self, name: str, price: float) -> None:
        self.log(AuditEventBuilder.item_create_requested(
            name=name,
            price=price,
            correlation_id=self._correlation_id,
        ))

    def log_item_created(self, item_id: str, name: str, price: float) -> None:
        self.log(AuditEventBuilder.item_created(
            item_id=item_id,
            name=name,
            price=price,
            correlation_id=self._correlation_id,
        ))

    def log_create_failed(self, name: str, error_message: str) -> None:
        self.log(AuditEventBuilder.item_create_failed(
            name=name,
            error_message=error_message,
            correlation_id=self._correlation_id,
        ))

    def log_delete_requested(self, item_id: str) -> None:
        self.log(AuditEventBuilder.item_delete_requested(
            item_id=item_id,
            correlation_id=self._correlation_id,
        ))

    def log_item_deleted(self, item_id: str, found: bool) -> None:
        self.log(AuditEventBuilder.item_deleted(
            item_id=item_id,
            found=found,
            correlation_id=self._correlation_id,
        ))

    def log_delete_failed(self, item_id: str, error_message: str) -> None:
        self.log(AuditEventBuilder.item_delete_failed(
            item_id=item_id,
            error_message=error_message,
            correlation_id=self._correlation_id,
        ))

    def log_subscription_opened(self) -> None:
        self.log(AuditEventBuilder.subscription_opened(
            correlation_id=self._correlation_id,
        ))

    def log_subscription_closed(self, discarded: int) -> None:
        self.log(AuditEventBuilder.subscription_closed(
            discarded=discarded,
            correlation_id=self._correlation_id,
        ))

    def log_snapshot_applied(self, item_count: int, total: float, skipped: int = 0) -> None:
        if skipped:
            self.log(AuditEventBuilder.snapshot_discarded(
                skipped=skipped,
                correlation_id=self._correlation_id,
            ))
        self.log(AuditEventBuilder.snapshot_applied(
            item_count=item_count,
            total=total,
            correlation_id=self._correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=self._correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    The page creates one per browser session.
    """
    return uuid4()
