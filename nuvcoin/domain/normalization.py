"""
Normalization boundary for transaction records.

Every record read from the durable store or exchanged with the remote
authority passes through `normalize_record`. The blob carries no schema
version, so this is where older or foreign shapes are coerced into the
canonical `TransactionRecord`: renamed fields are mapped, missing enums get
fixed defaults and amounts become non-negative integers. Malformed records
are repaired, never dropped.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from nuvcoin.domain.models import (
    Category,
    PaymentMethod,
    TransactionKind,
    TransactionRecord,
    TransactionStatus,
)
from nuvcoin.utils.formatting import make_id, now_iso, today_iso

DEFAULT_CATEGORY = Category.OUTROS
DEFAULT_PAYMENT_METHOD = PaymentMethod.PIX
DEFAULT_STATUS = TransactionStatus.PAID
DEFAULT_KIND = TransactionKind.EXPENSE

# First match wins.
DATE_FIELDS: Sequence[str] = ("occurredOn", "occurred_on", "dateISO", "date")
AMOUNT_FIELDS: Sequence[str] = ("amountMinorUnits", "amount_minor_units", "amountCents", "amount")
KIND_FIELDS: Sequence[str] = ("kind", "type")
TITLE_FIELDS: Sequence[str] = ("title", "description")
CREATED_FIELDS: Sequence[str] = ("createdAt", "created_at", "createdAtISO")
PAYMENT_FIELDS: Sequence[str] = ("paymentMethod", "payment_method", "paymentType")

_KIND_ALIASES = {
    "income": TransactionKind.INCOME,
    "receita": TransactionKind.INCOME,
    "expense": TransactionKind.EXPENSE,
    "despesa": TransactionKind.EXPENSE,
}

RecordLike = Union[TransactionRecord, Mapping[str, Any]]


def _first(raw: Mapping[str, Any], names: Iterable[str]) -> Any:
    for name in names:
        value = raw.get(name)
        if value is not None and value != "":
            return value
    return None


def coerce_amount(value: Any) -> int:
    """Coerce any amount representation to a non-negative integer of minor units."""
    if isinstance(value, bool) or value is None:
        return 0
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return 0
    if not amount.is_finite():
        return 0
    return abs(int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))


def coerce_kind(value: Any) -> TransactionKind:
    if isinstance(value, TransactionKind):
        return value
    return _KIND_ALIASES.get(str(value or "").strip().lower(), DEFAULT_KIND)


def _coerce_enum(enum_cls: Any, value: Any, default: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        return default


def coerce_date(value: Any) -> Optional[str]:
    """
    Return a zero-padded ``YYYY-MM-DD`` string, or None when `value` holds no date.

    Accepts `date`/`datetime` objects, full ISO timestamps (the date part is
    kept) and unpadded forms such as ``2026-2-1``.
    """
    if isinstance(value, date):
        return value.isoformat()[:10]
    if not isinstance(value, str):
        return None
    head = value.strip()[:10].split("T")[0]
    parts = head.split("-")
    if len(parts) != 3:
        return None
    try:
        return date(int(parts[0]), int(parts[1]), int(parts[2])).isoformat()
    except ValueError:
        return None


def normalize_record(raw: RecordLike) -> TransactionRecord:
    """Coerce one record of any known shape into a canonical `TransactionRecord`."""
    if isinstance(raw, TransactionRecord):
        return raw

    created_at = _first(raw, CREATED_FIELDS)
    if not isinstance(created_at, str):
        created_at = now_iso()
    occurred_on = (
        coerce_date(_first(raw, DATE_FIELDS)) or coerce_date(created_at) or today_iso()
    )
    title = _first(raw, TITLE_FIELDS)

    return TransactionRecord(
        id=str(raw.get("id") or make_id()),
        kind=coerce_kind(_first(raw, KIND_FIELDS)),
        title="" if title is None else str(title),
        category=_coerce_enum(Category, raw.get("category"), DEFAULT_CATEGORY),
        amount_minor_units=coerce_amount(_first(raw, AMOUNT_FIELDS)),
        occurred_on=occurred_on,
        created_at=created_at,
        payment_method=_coerce_enum(
            PaymentMethod, _first(raw, PAYMENT_FIELDS), DEFAULT_PAYMENT_METHOD
        ),
        status=_coerce_enum(TransactionStatus, raw.get("status"), DEFAULT_STATUS),
    )


def normalize_records(raw_items: Any) -> List[TransactionRecord]:
    """Normalize a decoded JSON payload; anything that is not a list yields an empty list."""
    if not isinstance(raw_items, list):
        return []
    return [
        normalize_record(item)
        for item in raw_items
        if isinstance(item, (Mapping, TransactionRecord))
    ]


__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_KIND",
    "DEFAULT_PAYMENT_METHOD",
    "DEFAULT_STATUS",
    "RecordLike",
    "coerce_amount",
    "coerce_date",
    "coerce_kind",
    "normalize_record",
    "normalize_records",
]
