"""
Domain package for nuvcoin.

Exports the transaction record, the derived value objects used by the
aggregation engine, and the normalization boundary.
"""

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
    TransactionStatus,
    TrendDirection,
)
from nuvcoin.domain.normalization import normalize_record, normalize_records

__all__ = [
    "Category",
    "CategoryTotal",
    "FinanceSummary",
    "MetricDelta",
    "MonthComparisonResult",
    "MonthlyTotals",
    "PaymentMethod",
    "TransactionKind",
    "TransactionRecord",
    "TransactionStatus",
    "TrendDirection",
    "normalize_record",
    "normalize_records",
]
