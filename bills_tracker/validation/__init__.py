"""Input validation package."""

from bills_tracker.validation.validator import (
    ExpenseInputValidator,
    parse_amount,
    parse_due_day,
)

__all__ = ["ExpenseInputValidator", "parse_amount", "parse_due_day"]
