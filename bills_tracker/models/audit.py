"""
Audit Models for Bills Tracker

Every change to the expense collection is logged for audit purposes.
This provides:
1. Traceability of every add, edit, delete and payment toggle
2. Debugging information when a load drops records or a save fails
3. A way to reconstruct what happened to a bill

DESIGN DECISION: Audit events are not persisted. They are emitted through the
local structured log, and only the most recent ones are kept in memory
for the activity list.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every command on the tracker has its own event type.
    """
    # Persistence
    EXPENSES_LOADED = "expenses_loaded"
    RECORD_DROPPED = "record_dropped"
    LOAD_FAILED = "load_failed"
    SAVE_FAILED = "save_failed"

    # Commands
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    PAYMENT_TOGGLED = "payment_toggled"
    INPUT_REJECTED = "input_rejected"
    EXPENSE_NOT_FOUND = "expense_not_found"

    # Settings
    PREFERENCES_SAVED = "preferences_saved"

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
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
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

    # Context - which expense is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'store', 'preferences')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

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
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, name, amount)
        event = AuditEventBuilder.payment_toggled(expense_id, "2024-02", True)
    """

    @staticmethod
    def expenses_loaded(count: int, dropped: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_LOADED,
            severity=AuditSeverity.WARNING if dropped else AuditSeverity.INFO,
            entity_type="store",
            description=f"Loaded {count} expenses ({dropped} dropped)",
            details={
                "count": count,
                "dropped": dropped,
            },
        )

    @staticmethod
    def record_dropped(index: int, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DROPPED,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            description=f"Dropped malformed stored record at index {index}",
            details={
                "index": index,
            },
            error_message=reason,
        )

    @staticmethod
    def load_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="store",
            description="Could not load expenses",
            error_message=error_message,
        )

    @staticmethod
    def save_failed(
        error_message: str,
        expense_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="store",
            description=f"Failed to save {expense_count} expenses",
            details={
                "expense_count": expense_count,
            },
            error_message=error_message,
        )

    @staticmethod
    def expense_added(
        expense_id: str,
        name: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense added: {name} - {amount}",
            details={
                "name": name,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(
        expense_id: str,
        changes: dict[str, Any],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense updated ({len(changes)} fields changed)",
            details={
                "changes": changes,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(expense_id: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense deleted: {name}",
            details={
                "name": name,
            },
            is_user_action=True,
        )

    @staticmethod
    def payment_toggled(
        expense_id: str,
        month_key: str,
        paid: bool,
    ) -> AuditEvent:
        state = "paid" if paid else "unpaid"
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_TOGGLED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Marked {state} for {month_key}",
            details={
                "month_key": month_key,
                "paid": paid,
            },
            is_user_action=True,
        )

    @staticmethod
    def input_rejected(
        issues: list[dict],
        expense_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Input rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_not_found(expense_id: str, action: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Cannot {action}: expense not found",
            details={
                "action": action,
            },
        )

    @staticmethod
    def preferences_saved(dark_mode: bool, seed_color: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PREFERENCES_SAVED,
            entity_type="preferences",
            description="Display preferences saved",
            details={
                "dark_mode": dark_mode,
                "seed_color": seed_color,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
