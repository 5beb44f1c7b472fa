"""
Data Models Package

This package contains all Pydantic models used in Bills Tracker.
Everything stored or derived by the tracker conforms to these schemas.
"""

from bills_tracker.models.expense import (
    INPUT_CATEGORY_DEFAULT,
    STORED_CATEGORY_DEFAULT,
    BillRow,
    CommandResult,
    DueStatus,
    Expense,
    ExpenseDraft,
    LegendEntry,
    MonthKey,
    OverviewMetrics,
    ValidationIssue,
    ValidationResult,
    new_expense_id,
    parse_month_key,
)
from bills_tracker.models.preferences import AppPreferences
from bills_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "INPUT_CATEGORY_DEFAULT",
    "STORED_CATEGORY_DEFAULT",
    "BillRow",
    "CommandResult",
    "DueStatus",
    "Expense",
    "ExpenseDraft",
    "LegendEntry",
    "MonthKey",
    "OverviewMetrics",
    "ValidationIssue",
    "ValidationResult",
    "new_expense_id",
    "parse_month_key",
    # Preferences
    "AppPreferences",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
