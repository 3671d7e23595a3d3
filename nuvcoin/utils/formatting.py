"""
Money and date helpers shared by the CLI, the normalization boundary and the
synchronization cache.

Amounts are always integer minor units (centavos); conversion to and from
human-readable BRL strings happens only at the edges.
"""

from __future__ import annotations

import re
import uuid
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

_NON_AMOUNT_CHARS = re.compile(r"[^\d,.\-]")


def make_id() -> str:
    """Generate a new opaque record identifier."""
    return str(uuid.uuid4())


def today_iso(today: Optional[date] = None) -> str:
    """Return today's local date as ``YYYY-MM-DD``."""
    return (today or date.today()).isoformat()


def now_iso() -> str:
    """Return the current UTC timestamp in ISO-8601 form."""
    return datetime.now(timezone.utc).isoformat()


def parse_amount_to_cents(text: str) -> int:
    """
    Convert a pt-BR formatted amount (``"1.234,56"``) into minor units.

    Dots are thousands separators and the comma is the decimal mark. Returns
    0 for anything that is not a positive number, so callers can treat 0 as
    "invalid input".
    """
    normalized = _NON_AMOUNT_CHARS.sub("", text.strip()).replace(".", "").replace(",", ".")
    try:
        value = Decimal(normalized)
    except InvalidOperation:
        return 0
    if not value.is_finite() or value <= 0:
        return 0
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_brl(cents: int) -> str:
    """Format minor units as Brazilian reais, e.g. ``R$ 1.234,56``."""
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    grouped = f"{whole:,}".replace(",", ".")
    return f"{sign}R$ {grouped},{frac:02d}"


def format_pct(pct: Optional[float]) -> str:
    """Render a percentage change with one decimal, or a dash when undefined."""
    if pct is None:
        return "—"
    return f"{abs(pct):.1f}%"


__all__ = [
    "format_brl",
    "format_pct",
    "make_id",
    "now_iso",
    "parse_amount_to_cents",
    "today_iso",
]
