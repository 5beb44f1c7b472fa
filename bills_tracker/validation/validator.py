"""
Expense Input Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - FIELD VALIDATION:
- Required field presence (name, amount)
- Name and category fit the stored length limits
- Amount parses as a finite, non-negative decimal ("1,200.50" is accepted)
- Due day is an integer between 1 and 31
- Blank category falls back to "Other"

STAGE 2 - COLLECTION CHECKS:
- Another bill with the same name already exists
- This needs the current collection, so it only runs when one is given

IMPORTANT: Validation never fixes bad values.
It reports them so the form can show them next to the field.
The only substitution is the documented blank-category default.
"""

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from bills_tracker.models.expense import (
    CATEGORY_MAX_LENGTH,
    INPUT_CATEGORY_DEFAULT,
    NAME_MAX_LENGTH,
    Expense,
    ExpenseDraft,
    ValidationIssue,
    ValidationResult,
)


MIN_DUE_DAY = 1
MAX_DUE_DAY = 31


def parse_amount(raw: str) -> Optional[Decimal]:
    """
    Parse a user-typed amount ('1,200.50' -> Decimal('1200.50')).

    Returns None if it is not a finite number.
    """
    cleaned = raw.replace(",", "").strip()
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def parse_due_day(raw: Any) -> Optional[int]:
    """Accept an int or a string of decimal digits; anything else is None."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdecimal():
        return int(raw.strip())
    return None


class ExpenseInputValidator:
    """
    Validates the add/edit form before an Expense is built.

    Stage 1: Field validation (always)
    Stage 2: Collection checks (only when existing expenses are given)
    """

    def _validate_fields(
        self,
        draft: ExpenseDraft,
    ) -> tuple[dict, list[ValidationIssue]]:
        """
        Stage 1: Field validation.

        Returns: (cleaned_values, list_of_issues)
        """
        issues = []
        cleaned = {}

        name = draft.name.strip()
        if not name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Name is required",
                severity="error",
                suggested_fix="Enter a name such as Rent or Wi-Fi",
            ))
        elif len(name) > NAME_MAX_LENGTH:
            issues.append(ValidationIssue(
                field="name",
                issue_type="out_of_range",
                message=f"Name must be at most {NAME_MAX_LENGTH} characters",
                severity="error",
            ))
        else:
            cleaned["name"] = name

        if not draft.amount.strip():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
        else:
            amount = parse_amount(draft.amount)
            if amount is None:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_format",
                    message="Enter a number",
                    severity="error",
                    suggested_fix="Use digits with an optional decimal point, e.g. 1200.50",
                ))
            elif amount < 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="out_of_range",
                    message="Amount must be 0 or more",
                    severity="error",
                ))
            else:
                cleaned["amount"] = amount

        due_day = parse_due_day(draft.due_day)
        if due_day is None:
            issues.append(ValidationIssue(
                field="due_day",
                issue_type="invalid_format",
                message="Due day must be a whole number",
                severity="error",
            ))
        elif not MIN_DUE_DAY <= due_day <= MAX_DUE_DAY:
            issues.append(ValidationIssue(
                field="due_day",
                issue_type="out_of_range",
                message=f"Due day must be between {MIN_DUE_DAY} and {MAX_DUE_DAY}",
                severity="error",
                suggested_fix="Short months use their last day automatically",
            ))
        else:
            cleaned["due_day"] = due_day

        category = draft.category.strip() or INPUT_CATEGORY_DEFAULT
        if len(category) > CATEGORY_MAX_LENGTH:
            issues.append(ValidationIssue(
                field="category",
                issue_type="out_of_range",
                message=f"Category must be at most {CATEGORY_MAX_LENGTH} characters",
                severity="error",
            ))
        else:
            cleaned["category"] = category

        return cleaned, issues

    def _check_duplicates(
        self,
        name: str,
        existing: Iterable[Expense],
        editing_id: Optional[str],
    ) -> list[ValidationIssue]:
        """Stage 2: warn when another bill already has this name."""
        folded = name.casefold()
        for expense in existing:
            if expense.id == editing_id:
                continue
            if expense.name.casefold() == folded:
                return [ValidationIssue(
                    field="name",
                    issue_type="potential_duplicate",
                    message=f"A bill named '{expense.name}' already exists",
                    severity="warning",
                    suggested_fix="Check this isn't the same bill entered twice",
                )]
        return []

    def validate(
        self,
        draft: ExpenseDraft,
        existing: Optional[Iterable[Expense]] = None,
        editing_id: Optional[str] = None,
    ) -> ValidationResult:
        """
        Run full validation.

        Args:
            draft: The raw form values
            existing: Current collection, for the duplicate-name check
            editing_id: Id of the bill being edited (excluded from that check)

        Returns:
            ValidationResult with cleaned values filled in when valid
        """
        cleaned, issues = self._validate_fields(draft)

        if existing is not None and "name" in cleaned:
            issues.extend(self._check_duplicates(cleaned["name"], existing, editing_id))

        is_valid = not any(issue.severity == "error" for issue in issues)
        if not is_valid:
            return ValidationResult(is_valid=False, issues=issues)

        return ValidationResult(is_valid=True, issues=issues, **cleaned)

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a short summary of validation results for the form.
        """
        if result.is_valid and not result.issues:
            return "✅ Looks good."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        warnings = [i for i in result.issues if i.severity == "warning"]
        if warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify:")
            for issue in warnings:
                lines.append(f"   • {issue.message}")

        return "\n".join(lines)
