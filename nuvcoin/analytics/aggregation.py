"""
Aggregation engine for nuvcoin.

Pure functions over a snapshot of `TransactionRecord`s. Nothing here mutates
its input or validates it: records are expected to have passed the
normalization boundary already, and a malformed record that slips through
simply contributes to the totals as-is.

Usage:
    from nuvcoin.analytics.aggregation import summarize, compare_to_previous_month

    summary = summarize(records)
    cmp = compare_to_previous_month(records, "2026-01-15")
    cmp.previous_month_key  # "2025-12"
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from nuvcoin.analytics.periods import (
    DateLike,
    month_bounds,
    month_key,
    parse_date,
    previous_month_bounds,
)
from nuvcoin.domain.models import (
    Category,
    CategoryTotal,
    FinanceSummary,
    MetricDelta,
    MonthComparisonResult,
    MonthlyTotals,
    PaymentMethod,
    TransactionKind,
    TransactionRecord,
    TrendDirection,
)


def summarize(records: Iterable[TransactionRecord]) -> FinanceSummary:
    """
    Total income, expense and credit spend in a single pass.

    Credit spend is the subset of expenses paid with `PaymentMethod.CREDIT`;
    balance is income minus expense and may be negative.
    """
    income = 0
    expense = 0
    credit = 0

    for record in records:
        if record.kind is TransactionKind.INCOME:
            income += record.amount_minor_units
        elif record.kind is TransactionKind.EXPENSE:
            expense += record.amount_minor_units
            if record.payment_method is PaymentMethod.CREDIT:
                credit += record.amount_minor_units

    return FinanceSummary(income=income, expense=expense, credit=credit, balance=income - expense)


def summarize_in_range(
    records: Iterable[TransactionRecord],
    start_inclusive: DateLike,
    end_exclusive: DateLike,
) -> FinanceSummary:
    """Summarize records whose `occurred_on` falls in ``[start_inclusive, end_exclusive)``."""
    start = parse_date(start_inclusive)
    end = parse_date(end_exclusive)
    return summarize(r for r in records if start <= parse_date(r.occurred_on) < end)


def build_metric_delta(current: int, previous: int) -> MetricDelta:
    """Difference, percentage change and trend between two period values."""
    delta = current - previous
    if delta > 0:
        direction = TrendDirection.UP
    elif delta < 0:
        direction = TrendDirection.DOWN
    else:
        direction = TrendDirection.FLAT

    pct = None if previous == 0 else delta / previous * 100
    return MetricDelta(
        current=current, previous=previous, delta=delta, pct=pct, direction=direction
    )


def compare_to_previous_month(
    records: Iterable[TransactionRecord], reference_date: DateLike
) -> MonthComparisonResult:
    """
    Compare the calendar month containing `reference_date` against the month before it.

    The previous month is derived from the current month's first day, so a
    January reference compares against December of the prior year.
    """
    snapshot = list(records)
    current_start, current_end = month_bounds(reference_date)
    previous_start, previous_end = previous_month_bounds(current_start)

    current = summarize_in_range(snapshot, current_start, current_end)
    previous = summarize_in_range(snapshot, previous_start, previous_end)

    return MonthComparisonResult(
        current=current,
        previous=previous,
        income=build_metric_delta(current.income, previous.income),
        expense=build_metric_delta(current.expense, previous.expense),
        credit=build_metric_delta(current.credit, previous.credit),
        balance=build_metric_delta(current.balance, previous.balance),
        current_month_key=month_key(current_start),
        previous_month_key=month_key(previous_start),
    )


def group_expenses_by_category(records: Iterable[TransactionRecord]) -> List[CategoryTotal]:
    """One total per category that has at least one expense, in first-seen order."""
    totals: Dict[Category, int] = {}
    for record in records:
        if record.kind is TransactionKind.EXPENSE:
            totals[record.category] = totals.get(record.category, 0) + record.amount_minor_units
    return [CategoryTotal(category=category, total=total) for category, total in totals.items()]


def group_by_month(records: Iterable[TransactionRecord]) -> List[MonthlyTotals]:
    """
    Income and expense totals per ``YYYY-MM`` bucket, in first-seen order.

    Only months with at least one record appear; filling a contiguous axis is
    left to `nuvcoin.analytics.periods.fill_month_gaps`.
    """
    buckets: Dict[str, List[int]] = {}
    for record in records:
        bucket = buckets.setdefault(record.month_key, [0, 0])
        if record.kind is TransactionKind.INCOME:
            bucket[0] += record.amount_minor_units
        elif record.kind is TransactionKind.EXPENSE:
            bucket[1] += record.amount_minor_units
    return [
        MonthlyTotals(month=month, income=income, expense=expense)
        for month, (income, expense) in buckets.items()
    ]


__all__ = [
    "build_metric_delta",
    "compare_to_previous_month",
    "group_by_month",
    "group_expenses_by_category",
    "summarize",
    "summarize_in_range",
]
