"""
Core Data Models for Bills Tracker

These models define the schemas for everything the tracker stores or derives.
They are designed to:
1. Enforce type safety at the load boundary
2. Provide clear validation error messages
3. Be serializable to the flat structure kept in the local store
4. Carry derived values to the front end without recomputation

DESIGN DECISION: We use Pydantic v2. Stored records go through an explicit
type check before validation, so a day stored as a string or a bool stored
as an amount is rejected rather than silently coerced.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    field_validator,
    model_validator,
)


# Category written by older stores that predate categories
STORED_CATEGORY_DEFAULT = "General"

# Category used when the user leaves the field blank
INPUT_CATEGORY_DEFAULT = "Other"

NAME_MAX_LENGTH = 200
CATEGORY_MAX_LENGTH = 100

MONTH_KEY_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

MonthKey = Annotated[str, StringConstraints(pattern=MONTH_KEY_PATTERN)]

_MONTH_KEY_ADAPTER = TypeAdapter(MonthKey)


def parse_month_key(value: str) -> str:
    """
    Check that a string is a YYYY-MM month key.

    Raises:
        pydantic.ValidationError: If the format is wrong
    """
    return _MONTH_KEY_ADAPTER.validate_python(value)


def new_expense_id() -> str:
    """Generate an opaque id for a new expense."""
    return uuid4().hex


def _is_number(value: Any) -> bool:
    # bool is an int subclass, but never a valid amount or day
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class Expense(BaseModel):
    """
    A recurring monthly bill.

    The due day is a day-of-month, not a date. Payment is tracked per
    calendar month in paid_by_month: month key -> ISO timestamp of payment.
    A missing key means the bill is unpaid for that month.

    Field names are snake_case in Python and camelCase in storage
    (dueDay, paidByMonth).
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: str = Field(
        default_factory=new_expense_id,
        min_length=1,
        description="Opaque unique id, immutable after creation"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        description="Display name (e.g., Rent, Wi-Fi)"
    )
    category: str = Field(
        default=STORED_CATEGORY_DEFAULT,
        min_length=1,
        max_length=CATEGORY_MAX_LENGTH,
        description="Free-form category label"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Monthly amount, currency-agnostic"
    )
    due_day: int = Field(
        ...,
        ge=1,
        le=31,
        alias="dueDay",
        description="Day of month the bill recurs on (clamped per month)"
    )
    paid_by_month: dict[MonthKey, str] = Field(
        default_factory=dict,
        alias="paidByMonth",
        description="Month key (YYYY-MM) -> ISO-8601 paid timestamp"
    )

    @model_validator(mode='before')
    @classmethod
    def check_stored_types(cls, data: Any) -> Any:
        """
        Reject wrongly typed required fields and fill tolerant defaults.

        Applies to both storage dicts (camelCase) and keyword construction.
        """
        if not isinstance(data, dict):
            return data

        data = dict(data)

        def key_for(field_name: str, alias: str) -> str:
            return alias if alias in data else field_name

        if "id" in data and not isinstance(data["id"], str):
            raise ValueError("id must be a string")

        if "name" in data and not isinstance(data["name"], str):
            raise ValueError("name must be a string")

        if "amount" in data:
            amount = data["amount"]
            if isinstance(amount, float):
                # Go through str so 0.1 stays 0.1
                data["amount"] = Decimal(str(amount))
            elif not (_is_number(amount) or isinstance(amount, str)):
                raise ValueError("amount must be a number")

        day_key = key_for("due_day", "dueDay")
        if day_key in data and (
            isinstance(data[day_key], bool) or not isinstance(data[day_key], int)
        ):
            raise ValueError("dueDay must be an integer")

        if data.get("category") is None:
            data["category"] = STORED_CATEGORY_DEFAULT

        paid_key = key_for("paid_by_month", "paidByMonth")
        if data.get(paid_key) is None:
            data[paid_key] = {}

        return data

    @field_validator('paid_by_month', mode='before')
    @classmethod
    def stringify_paid_timestamps(cls, v: Any) -> Any:
        """Keep whatever was stored as a string; paid_at() decides if it parses."""
        if isinstance(v, dict):
            return {k: str(ts) for k, ts in v.items()}
        return v

    def is_paid(self, month_key: str) -> bool:
        """Whether this bill is paid for the given month."""
        return month_key in self.paid_by_month

    def paid_at(self, month_key: str) -> Optional[datetime]:
        """
        When this bill was paid for the given month.

        Returns None if unpaid, or if the stored timestamp does not parse.
        """
        raw = self.paid_by_month.get(month_key)
        if raw is None:
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None

    def toggle_paid(self, month_key: str, now: datetime) -> bool:
        """
        Flip the paid state for one month.

        Removes the month if it was paid, otherwise records `now`.
        Returns the new paid state.
        """
        month_key = parse_month_key(month_key)
        if month_key in self.paid_by_month:
            del self.paid_by_month[month_key]
            return False
        self.paid_by_month[month_key] = now.isoformat()
        return True

    def to_storage_dict(self) -> dict:
        """
        Convert to the flat structure kept in the local store.

        Keys: id, name, category, amount, dueDay, paidByMonth.
        The amount is written as a decimal string so it reads back exactly.
        """
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_storage_dict(cls, data: dict) -> "Expense":
        """
        Build an Expense from its stored structure.

        Raises:
            pydantic.ValidationError: If id, name, amount or dueDay is
                missing or has the wrong type, or a value is out of range
        """
        return cls.model_validate(data)


class ExpenseDraft(BaseModel):
    """
    Raw field values as typed by the user in the add/edit form.

    CRITICAL: This is PROPOSED data, NOT verified.
    It MUST go through ExpenseInputValidator before an Expense is built.
    Everything is a string (or loose int) because that is what forms hand us.
    """

    name: str = ""
    category: str = ""
    amount: str = ""
    due_day: Any = Field(
        default=None,
        description="Day of month as entered (int or numeric string)"
    )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating an ExpenseDraft.

    On success the cleaned values are filled in, ready to build an Expense.
    """

    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Cleaned values (only set when valid)
    name: Optional[str] = None
    category: Optional[str] = None
    amount: Optional[Decimal] = None
    due_day: Optional[int] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    def errors_for(self, field: str) -> list[str]:
        """Error messages for one field, for inline form feedback."""
        return [
            issue.message for issue in self.issues
            if issue.field == field and issue.severity == "error"
        ]


# =============================================================================
# VIEW MODELS (derived, never stored)
# =============================================================================

class DueStatus(str, Enum):
    """Where an expense stands for the current month."""
    PAID = "paid"
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    UPCOMING = "upcoming"


class BillRow(BaseModel):
    """One line of the bills list, computed for a reference date."""

    expense: Expense
    due_date: date
    days_until_due: int
    is_paid: bool
    paid_at: Optional[datetime] = None
    status: DueStatus


class OverviewMetrics(BaseModel):
    """Numbers shown on the overview cards."""

    month_key: str
    bill_count: int = Field(ge=0)
    paid_count: int = Field(ge=0)
    total_all: Decimal
    total_paid: Decimal
    total_unpaid: Decimal


class LegendEntry(BaseModel):
    """A category slice of the breakdown chart."""

    category: str
    amount: Decimal
    percent: Decimal


# =============================================================================
# COMMAND RESULT MODELS
# =============================================================================

class CommandResult(BaseModel):
    """
    Result of a mutating command on the tracker.

    `expenses` is always the collection as it stands after the command,
    whether or not the save succeeded.
    """

    success: bool
    error_message: Optional[str] = None

    expenses: list[Expense] = Field(default_factory=list)
    expense: Optional[Expense] = Field(
        default=None,
        description="The record the command acted on, if any"
    )
    validation: Optional[ValidationResult] = None
    saved: bool = Field(
        default=False,
        description="Whether the collection was persisted after the change"
    )
