"""
Utilities package for nuvcoin.

Exports shared helpers for logging and money/date formatting.
Keep this package lightweight and free of domain-specific logic.
"""

from nuvcoin.utils.formatting import (
    format_brl,
    format_pct,
    make_id,
    now_iso,
    parse_amount_to_cents,
    today_iso,
)
from nuvcoin.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "format_brl",
    "format_pct",
    "make_id",
    "now_iso",
    "parse_amount_to_cents",
    "today_iso",
]
