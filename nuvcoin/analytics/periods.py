"""
Calendar helpers for the aggregation engine and the dashboard views.

Month keys are ``YYYY-MM`` strings and date ranges are half-open
``[start, end)``. Month arithmetic always starts from the first day of a
month so day-of-month overflow (31 Jan - 1 month) can never occur.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from nuvcoin.domain.models import MonthlyTotals, TransactionRecord

DateLike = Union[date, str]

MONTH_LABELS = (
    "Jan", "Fev", "Mar", "Abr", "Mai", "Jun",
    "Jul", "Ago", "Set", "Out", "Nov", "Dez",
)


class ReportPeriod(str, Enum):
    MONTH = "MONTH"
    LAST_3 = "LAST_3"
    YEAR = "YEAR"
    ALL = "ALL"


def parse_date(value: DateLike) -> date:
    """Parse a ``YYYY-MM-DD`` string (or pass a `date` through) without any timezone shift."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """Move (year, month) by `offset` months, rolling the year as needed."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def month_start(value: DateLike) -> date:
    d = parse_date(value)
    return date(d.year, d.month, 1)


def month_bounds(reference: DateLike) -> Tuple[date, date]:
    """Return ``[first day of month, first day of next month)`` for `reference`."""
    start = month_start(reference)
    year, month = shift_month(start.year, start.month, 1)
    return start, date(year, month, 1)


def previous_month_bounds(current_start: DateLike) -> Tuple[date, date]:
    """Bounds of the month before the one starting at `current_start`."""
    end = month_start(current_start)
    year, month = shift_month(end.year, end.month, -1)
    return date(year, month, 1), end


def month_key(value: DateLike) -> str:
    d = parse_date(value)
    return f"{d.year:04d}-{d.month:02d}"


def add_months(key: str, offset: int) -> str:
    year, month = shift_month(int(key[:4]), int(key[5:7]), offset)
    return f"{year:04d}-{month:02d}"


def list_months_between(start_key: str, end_key: str) -> List[str]:
    """Contiguous month keys from `start_key` to `end_key`, both inclusive."""
    months: List[str] = []
    current = start_key
    while current <= end_key:
        months.append(current)
        current = add_months(current, 1)
    return months


def month_label(key: str) -> str:
    """``"2026-02"`` -> ``"Fev/26"``."""
    return f"{MONTH_LABELS[int(key[5:7]) - 1]}/{key[2:4]}"


def fill_month_gaps(series: Sequence[MonthlyTotals]) -> List[MonthlyTotals]:
    """
    Expand a monthly series to a contiguous, sorted month axis.

    Months missing between the earliest and latest entry are synthesized
    with zero totals. The aggregation engine never does this itself; it is a
    presentation concern kept here so every view fills gaps the same way.
    """
    if not series:
        return []
    by_month = {item.month: item for item in series}
    keys = sorted(by_month)
    return [
        by_month.get(key) or MonthlyTotals(month=key)
        for key in list_months_between(keys[0], keys[-1])
    ]


def period_start(period: ReportPeriod, today: Optional[date] = None) -> Optional[date]:
    """First day included by a dashboard period filter, or None for ALL."""
    today = today or date.today()
    if period is ReportPeriod.ALL:
        return None
    if period is ReportPeriod.MONTH:
        return date(today.year, today.month, 1)
    if period is ReportPeriod.LAST_3:
        year, month = shift_month(today.year, today.month, -2)
        return date(year, month, 1)
    return date(today.year, 1, 1)


def filter_by_period(
    records: Iterable[TransactionRecord],
    period: ReportPeriod,
    today: Optional[date] = None,
) -> List[TransactionRecord]:
    """Keep records dated on or after the period start (open-ended to the future)."""
    start = period_start(period, today)
    if start is None:
        return list(records)
    start_iso = start.isoformat()
    # occurred_on is fixed-width, so string order is date order
    return [r for r in records if r.occurred_on >= start_iso]


__all__ = [
    "MONTH_LABELS",
    "ReportPeriod",
    "add_months",
    "fill_month_gaps",
    "filter_by_period",
    "list_months_between",
    "month_bounds",
    "month_key",
    "month_label",
    "month_start",
    "parse_date",
    "period_start",
    "previous_month_bounds",
    "shift_month",
]
