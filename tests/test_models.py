"""
Tests for Bills Tracker models

Test strategy:
1. Unit tests for individual components (models, aggregation, validator)
2. Flow tests for the tracker commands (with in-memory storage)
3. File storage tests against a temporary directory
"""

import pytest
from datetime import datetime
from decimal import Decimal

from pydantic import ValidationError

from bills_tracker.models.expense import (
    BillRow,
    DueStatus,
    Expense,
    ExpenseDraft,
    ValidationIssue,
    ValidationResult,
    parse_month_key,
)
from bills_tracker.models.preferences import AppPreferences
from bills_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


FEB_15 = datetime(2024, 2, 15, 10, 30)


def make_expense(**overrides) -> Expense:
    fields = dict(name="Rent", category="Rent", amount=Decimal("1200"), due_day=31)
    fields.update(overrides)
    return Expense(**fields)


class TestExpenseModel:
    """Tests for the Expense model."""

    def test_expense_creation(self):
        """Test Expense model creation with defaults."""
        expense = make_expense()
        assert expense.name == "Rent"
        assert expense.amount == Decimal("1200")
        assert expense.due_day == 31
        assert expense.paid_by_month == {}
        assert expense.id

    def test_expense_ids_are_unique(self):
        """Test each new expense gets its own id."""
        assert make_expense().id != make_expense().id

    def test_expense_strips_whitespace(self):
        """Test that whitespace is stripped from the name."""
        expense = make_expense(name="  Wi-Fi  ")
        assert expense.name == "Wi-Fi"

    def test_expense_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            make_expense(amount=Decimal("-1"))

    def test_expense_accepts_zero_amount(self):
        """Test that a zero amount is allowed."""
        assert make_expense(amount=0).amount == Decimal("0")

    @pytest.mark.parametrize("day", [0, 32, -5])
    def test_expense_rejects_out_of_range_due_day(self, day):
        """Test due day must be between 1 and 31."""
        with pytest.raises(ValueError):
            make_expense(due_day=day)

    def test_expense_rejects_empty_name(self):
        """Test that a blank name is rejected."""
        with pytest.raises(ValueError):
            make_expense(name="   ")

    def test_float_amount_keeps_its_decimal_text(self):
        """Test that 0.1 becomes Decimal('0.1'), not a binary artefact."""
        assert make_expense(amount=0.1).amount == Decimal("0.1")


class TestPaidState:
    """Tests for per-month paid tracking."""

    def test_unpaid_by_default(self):
        """Test a new expense is unpaid for any month."""
        expense = make_expense()
        assert expense.is_paid("2024-02") is False
        assert expense.paid_at("2024-02") is None

    def test_toggle_marks_paid_with_timestamp(self):
        """Test toggling an unpaid month records `now`."""
        expense = make_expense()
        assert expense.toggle_paid("2024-02", FEB_15) is True
        assert expense.is_paid("2024-02")
        assert expense.paid_at("2024-02") == FEB_15

    def test_toggle_twice_is_an_involution(self):
        """Test two toggles return to the original state."""
        expense = make_expense()
        expense.toggle_paid("2024-02", FEB_15)
        assert expense.toggle_paid("2024-02", FEB_15) is False
        assert expense.is_paid("2024-02") is False
        assert expense.paid_by_month == {}

    def test_toggle_only_touches_that_month(self):
        """Test other months' history is left alone."""
        expense = make_expense(paid_by_month={"2024-01": "2024-01-03T08:00:00"})
        expense.toggle_paid("2024-02", FEB_15)
        expense.toggle_paid("2024-02", FEB_15)
        assert expense.paid_by_month == {"2024-01": "2024-01-03T08:00:00"}

    def test_toggle_rejects_bad_month_key(self):
        """Test month keys must be YYYY-MM."""
        with pytest.raises(ValueError):
            make_expense().toggle_paid("2024-13", FEB_15)

    def test_paid_at_malformed_timestamp_is_none(self):
        """Test a garbage stored timestamp reads as None rather than failing."""
        expense = make_expense(paid_by_month={"2024-02": "not a date"})
        assert expense.is_paid("2024-02") is True
        assert expense.paid_at("2024-02") is None

    @pytest.mark.parametrize("key", ["2024-02", "1999-12", "2030-01"])
    def test_parse_month_key_accepts_valid(self, key):
        """Test well-formed month keys pass through."""
        assert parse_month_key(key) == key

    @pytest.mark.parametrize("key", ["2024-2", "2024-00", "24-02", "2024/02", ""])
    def test_parse_month_key_rejects_invalid(self, key):
        """Test malformed month keys are rejected."""
        with pytest.raises(ValueError):
            parse_month_key(key)


class TestSerialization:
    """Tests for the stored structure."""

    def test_storage_dict_keys(self):
        """Test the flat stored structure uses camelCase keys."""
        data = make_expense().to_storage_dict()
        assert list(data) == ["id", "name", "category", "amount", "dueDay", "paidByMonth"]
        assert data["amount"] == "1200"
        assert data["dueDay"] == 31

    def test_round_trip_empty_paid_map(self):
        """Test deserialize(serialize(e)) == e with no payments."""
        expense = make_expense(amount=Decimal("1200.50"))
        assert Expense.from_storage_dict(expense.to_storage_dict()) == expense

    def test_round_trip_with_payments(self):
        """Test round trip keeps payment history."""
        expense = make_expense(category="Utilities")
        expense.toggle_paid("2024-02", FEB_15)
        expense.toggle_paid("2024-01", datetime(2024, 1, 20))
        assert Expense.from_storage_dict(expense.to_storage_dict()) == expense

    def test_missing_category_defaults_to_general(self):
        """Test records stored without a category read as 'General'."""
        expense = Expense.from_storage_dict(
            {"id": "a1", "name": "Gym", "amount": 30, "dueDay": 5}
        )
        assert expense.category == "General"
        assert expense.paid_by_month == {}

    def test_null_paid_map_defaults_to_empty(self):
        """Test a null paidByMonth reads as no payments."""
        expense = Expense.from_storage_dict(
            {"id": "a1", "name": "Gym", "category": "Health", "amount": 30.5,
             "dueDay": 5, "paidByMonth": None}
        )
        assert expense.paid_by_month == {}
        assert expense.amount == Decimal("30.5")

    @pytest.mark.parametrize("missing", ["id", "name", "amount", "dueDay"])
    def test_missing_required_field_fails(self, missing):
        """Test records missing a required field are rejected."""
        data = {"id": "a1", "name": "Gym", "amount": 30, "dueDay": 5}
        del data[missing]
        with pytest.raises(ValidationError):
            Expense.from_storage_dict(data)

    @pytest.mark.parametrize("field,value", [
        ("id", 17),
        ("name", ["Gym"]),
        ("amount", True),
        ("amount", None),
        ("amount", "thirty"),
        ("dueDay", "5"),
        ("dueDay", 5.0),
        ("dueDay", True),
    ])
    def test_wrongly_typed_field_fails(self, field, value):
        """Test required fields of the wrong type are rejected."""
        data = {"id": "a1", "name": "Gym", "amount": 30, "dueDay": 5}
        data[field] = value
        with pytest.raises(ValidationError):
            Expense.from_storage_dict(data)

    def test_bad_month_key_in_stored_map_fails(self):
        """Test stored payment keys must be YYYY-MM."""
        with pytest.raises(ValidationError):
            Expense.from_storage_dict(
                {"id": "a1", "name": "Gym", "amount": 30, "dueDay": 5,
                 "paidByMonth": {"February": "2024-02-01T00:00:00"}}
            )


class TestSupportingModels:
    """Tests for drafts, view models and preferences."""

    def test_draft_defaults_are_blank(self):
        """Test an empty draft holds blank strings."""
        draft = ExpenseDraft()
        assert draft.name == ""
        assert draft.amount == ""
        assert draft.due_day is None

    def test_bill_row_holds_status(self):
        """Test BillRow carries the derived fields."""
        row = BillRow(
            expense=make_expense(),
            due_date=FEB_15.date(),
            days_until_due=0,
            is_paid=False,
            status=DueStatus.DUE_SOON,
        )
        assert row.status == DueStatus.DUE_SOON
        assert row.paid_at is None

    def test_preferences_defaults(self):
        """Test default preferences are light mode with the blue accent."""
        prefs = AppPreferences()
        assert prefs.dark_mode is False
        assert prefs.seed_color == "#1A73E8"

    def test_preferences_reject_bad_color(self):
        """Test accent colours must be #RRGGBB."""
        with pytest.raises(ValueError):
            AppPreferences(seed_color="blue")


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Amount is required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1
        assert result.errors_for("amount") == ["Amount is required"]
        assert result.errors_for("name") == []

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="name",
                    issue_type="potential_duplicate",
                    message="A bill named 'Rent' already exists",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.expense_added(
            expense_id="abc",
            name="Rent",
            amount="1200",
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["entity_id"] == "abc"
        assert log_dict["details"]["name"] == "Rent"
        assert log_dict["is_user_action"] is True

    def test_audit_event_builder_payment_toggled(self):
        """Test AuditEventBuilder.payment_toggled."""
        event = AuditEventBuilder.payment_toggled(
            expense_id="abc",
            month_key="2024-02",
            paid=True,
        )
        assert event.event_type == AuditEventType.PAYMENT_TOGGLED
        assert event.details == {"month_key": "2024-02", "paid": True}
        assert "paid" in event.description

    def test_audit_event_builder_loaded_with_drops_warns(self):
        """Test a load that dropped records is a warning."""
        assert AuditEventBuilder.expenses_loaded(3, 0).severity == AuditSeverity.INFO
        assert AuditEventBuilder.expenses_loaded(3, 1).severity == AuditSeverity.WARNING

    def test_audit_event_builder_save_failed(self):
        """Test AuditEventBuilder.save_failed is an error."""
        event = AuditEventBuilder.save_failed("disk full", expense_count=4)
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
