"""
nuvcoin - local-first personal finance core.

Tracks income and expense entries and derives dashboard views from them:

- An aggregation engine of pure functions (totals, credit spend, month over
  month comparison, category breakdown, monthly series)
- A local-first synchronization cache that serves reads from memory, applies
  writes optimistically to a durable key-value store and reconciles with a
  remote API in the background

Presentation is left to callers; the bundled typer CLI and rich reporter are
one such caller.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from nuvcoin.analytics.aggregation import (
    build_metric_delta,
    compare_to_previous_month,
    group_by_month,
    group_expenses_by_category,
    summarize,
    summarize_in_range,
)
from nuvcoin.config import Settings, get_settings
from nuvcoin.domain.models import (
    Category,
    FinanceSummary,
    MetricDelta,
    MonthComparisonResult,
    PaymentMethod,
    TransactionKind,
    TransactionRecord,
    TransactionStatus,
    TrendDirection,
)
from nuvcoin.domain.normalization import normalize_record
from nuvcoin.infrastructure.abstract import DurableStore, RemoteError, RemoteProvider
from nuvcoin.sync.cache import SyncCache
from nuvcoin.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Category",
    "FinanceSummary",
    "MetricDelta",
    "MonthComparisonResult",
    "PaymentMethod",
    "TransactionKind",
    "TransactionRecord",
    "TransactionStatus",
    "TrendDirection",
    "normalize_record",
    # Aggregation engine
    "build_metric_delta",
    "compare_to_previous_month",
    "group_by_month",
    "group_expenses_by_category",
    "summarize",
    "summarize_in_range",
    # Synchronization
    "DurableStore",
    "RemoteError",
    "RemoteProvider",
    "SyncCache",
    # Logging
    "configure_logging",
    "get_logger",
]
