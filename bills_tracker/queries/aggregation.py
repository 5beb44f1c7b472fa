"""
Aggregation Engine

DESIGN DECISION: Every number the front end shows is derived here,
from the full in-memory list and a reference "now" supplied by the caller.

- No function keeps state between calls
- Nothing is cached; callers recompute after every mutation
- Nothing here raises for well-formed records

Due dates are computed per month: a bill due on the 31st falls on the
last day of shorter months. The clamp is never written back to the record.
"""

import calendar
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal

from bills_tracker.models.expense import (
    BillRow,
    DueStatus,
    Expense,
    LegendEntry,
    OverviewMetrics,
)


ZERO = Decimal("0")

DEFAULT_DUE_SOON_DAYS = 3


def month_key(now: datetime) -> str:
    """Format the month of `now` as YYYY-MM."""
    return f"{now.year:04d}-{now.month:02d}"


def due_date_for_month(expense: Expense, now: datetime) -> date:
    """
    The date this bill falls due in `now`'s month.

    The due day is clamped to the month length, so day 31 in
    February gives the 28th (29th in a leap year).
    """
    last_day = calendar.monthrange(now.year, now.month)[1]
    day = min(max(expense.due_day, 1), last_day)
    return date(now.year, now.month, day)


def sort_order(expenses: Iterable[Expense], now: datetime) -> list[Expense]:
    """
    Sort by due date this month, then by name ignoring case.

    Returns a new list; the input is not modified.
    """
    return sorted(
        expenses,
        key=lambda e: (due_date_for_month(e, now), e.name.casefold()),
    )


def days_until_due(expense: Expense, now: datetime) -> int:
    """
    Whole days from today to this month's due date.

    Time of day is ignored. Negative means overdue.
    """
    return (due_date_for_month(expense, now) - now.date()).days


def total_all(expenses: Iterable[Expense]) -> Decimal:
    """Sum of all amounts, paid or not."""
    return sum((e.amount for e in expenses), ZERO)


def total_paid_this_month(expenses: Iterable[Expense], now: datetime) -> Decimal:
    mk = month_key(now)
    return sum((e.amount for e in expenses if e.is_paid(mk)), ZERO)


def total_unpaid_this_month(expenses: Iterable[Expense], now: datetime) -> Decimal:
    mk = month_key(now)
    return sum((e.amount for e in expenses if not e.is_paid(mk)), ZERO)


def category_totals(
    expenses: Iterable[Expense],
    now: datetime,
    paid_only: bool,
) -> dict[str, Decimal]:
    """
    Sum amounts per category.

    Args:
        expenses: Records to group
        now: Reference time; only its month matters
        paid_only: Count only bills paid for that month

    Returns:
        {category: total}. Order is not significant.
    """
    mk = month_key(now)
    totals: dict[str, Decimal] = {}

    for expense in expenses:
        if paid_only and not expense.is_paid(mk):
            continue
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount

    return totals


def percentage_breakdown(totals: Mapping[str, Decimal]) -> dict[str, Decimal]:
    """
    Each category's share of the grand total, in percent.

    Returns an empty dict when the grand total is zero.
    """
    grand_total = sum(totals.values(), ZERO)
    if grand_total == ZERO:
        return {}
    return {
        category: value / grand_total * 100
        for category, value in totals.items()
    }


def due_status(
    expense: Expense,
    now: datetime,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> DueStatus:
    """Classify a bill for the list colouring: paid, overdue, due soon or upcoming."""
    if expense.is_paid(month_key(now)):
        return DueStatus.PAID

    days = days_until_due(expense, now)
    if days < 0:
        return DueStatus.OVERDUE
    if days <= due_soon_days:
        return DueStatus.DUE_SOON
    return DueStatus.UPCOMING


def build_bill_rows(
    expenses: Iterable[Expense],
    now: datetime,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> list[BillRow]:
    """One row per bill, in sort_order, with everything the list shows."""
    mk = month_key(now)
    rows = []

    for expense in sort_order(expenses, now):
        rows.append(BillRow(
            expense=expense,
            due_date=due_date_for_month(expense, now),
            days_until_due=days_until_due(expense, now),
            is_paid=expense.is_paid(mk),
            paid_at=expense.paid_at(mk),
            status=due_status(expense, now, due_soon_days),
        ))

    return rows


def overview_metrics(expenses: list[Expense], now: datetime) -> OverviewMetrics:
    mk = month_key(now)
    return OverviewMetrics(
        month_key=mk,
        bill_count=len(expenses),
        paid_count=sum(1 for e in expenses if e.is_paid(mk)),
        total_all=total_all(expenses),
        total_paid=total_paid_this_month(expenses, now),
        total_unpaid=total_unpaid_this_month(expenses, now),
    )


def category_legend(totals: Mapping[str, Decimal]) -> list[LegendEntry]:
    """
    Chart legend: categories by amount, largest first.

    Ties are broken by category name. Empty when there is nothing to chart.
    """
    percents = percentage_breakdown(totals)
    if not percents:
        return []

    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [
        LegendEntry(category=category, amount=amount, percent=percents[category])
        for category, amount in ordered
    ]


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def describe_due(row: BillRow) -> str:
    """Short status text for a bill row (e.g., 'Due in 3 days')."""
    if row.is_paid:
        if row.paid_at is None:
            return "Paid"
        paid = row.paid_at
        return f"Paid {paid:%b} {paid.day}, {paid.year}"

    if row.days_until_due == 0:
        return "Due today"
    if row.days_until_due > 0:
        return f"Due in {_plural(row.days_until_due, 'day')}"
    return f"{_plural(-row.days_until_due, 'day')} overdue"
