"""
Data Models Package

Pydantic models for items, drafts, snapshots and audit events.
"""

from expense_tracker.models.item import (
    Draft,
    DraftValidationError,
    Item,
    Snapshot,
    compute_total,
    parse_price,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Item models
    "Draft",
    "DraftValidationError",
    "Item",
    "Snapshot",
    "compute_total",
    "parse_price",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
