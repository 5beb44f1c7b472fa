"""Aggregation package."""

from bills_tracker.queries.aggregation import (
    build_bill_rows,
    category_legend,
    category_totals,
    days_until_due,
    describe_due,
    due_date_for_month,
    due_status,
    month_key,
    overview_metrics,
    percentage_breakdown,
    sort_order,
    total_all,
    total_paid_this_month,
    total_unpaid_this_month,
)

__all__ = [
    "build_bill_rows",
    "category_legend",
    "category_totals",
    "days_until_due",
    "describe_due",
    "due_date_for_month",
    "due_status",
    "month_key",
    "overview_metrics",
    "percentage_breakdown",
    "sort_order",
    "total_all",
    "total_paid_this_month",
    "total_unpaid_this_month",
]
