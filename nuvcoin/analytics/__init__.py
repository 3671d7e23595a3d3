"""
Analytics package for nuvcoin.

Re-exports the aggregation engine and the calendar helpers so downstream code
can import from `nuvcoin.analytics` directly.
"""

from nuvcoin.analytics.aggregation import (
    build_metric_delta,
    compare_to_previous_month,
    group_by_month,
    group_expenses_by_category,
    summarize,
    summarize_in_range,
)
from nuvcoin.analytics.periods import (
    ReportPeriod,
    fill_month_gaps,
    filter_by_period,
    list_months_between,
    month_bounds,
    month_key,
    month_label,
    period_start,
    previous_month_bounds,
)

__all__ = [
    # Engine
    "build_metric_delta",
    "compare_to_previous_month",
    "group_by_month",
    "group_expenses_by_category",
    "summarize",
    "summarize_in_range",
    # Calendar helpers
    "ReportPeriod",
    "fill_month_gaps",
    "filter_by_period",
    "list_months_between",
    "month_bounds",
    "month_key",
    "month_label",
    "period_start",
    "previous_month_bounds",
]
