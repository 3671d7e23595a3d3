from __future__ import annotations

from datetime import date

import pytest

from nuvcoin.domain.models import (
    Category,
    PaymentMethod,
    TransactionKind,
    TransactionRecord,
    TransactionStatus,
)
from nuvcoin.domain.normalization import (
    coerce_amount,
    coerce_date,
    coerce_kind,
    normalize_record,
    normalize_records,
)


def test_legacy_shape_is_mapped_onto_canonical_fields():
    raw = {
        "id": "abc",
        "type": "DESPESA",
        "title": "Mercado",
        "category": "Alimentação",
        "amountCents": 1250,
        "dateISO": "2026-02-24",
        "createdAtISO": "2026-02-24T10:00:00.000Z",
        "paymentType": "credit",
        "status": "pending",
    }

    record = normalize_record(raw)

    assert record.id == "abc"
    assert record.kind is TransactionKind.EXPENSE
    assert record.category is Category.ALIMENTACAO
    assert record.amount_minor_units == 1250
    assert record.occurred_on == "2026-02-24"
    assert record.created_at == "2026-02-24T10:00:00.000Z"
    assert record.payment_method is PaymentMethod.CREDIT
    assert record.status is TransactionStatus.PENDING


def test_missing_optional_fields_get_fixed_defaults():
    record = normalize_record(
        {"id": "x", "kind": "INCOME", "amountMinorUnits": 10, "occurredOn": "2026-01-01"}
    )

    assert record.category is Category.OUTROS
    assert record.payment_method is PaymentMethod.PIX
    assert record.status is TransactionStatus.PAID
    assert record.title == ""


def test_unknown_enum_values_fall_back_to_defaults():
    record = normalize_record(
        {
            "id": "x",
            "kind": "EXPENSE",
            "category": "food",
            "paymentMethod": "boleto",
            "status": "??",
            "amountMinorUnits": 1,
            "occurredOn": "2026-01-01",
        }
    )
    assert record.category is Category.OUTROS
    assert record.payment_method is PaymentMethod.PIX
    assert record.status is TransactionStatus.PAID


def test_missing_id_is_generated_and_never_dropped():
    records = normalize_records([{}, {"title": "only a title"}])

    assert len(records) == 2
    assert all(r.id for r in records)
    assert records[0].id != records[1].id
    assert records[1].title == "only a title"


def test_missing_date_falls_back_to_created_at():
    record = normalize_record({"createdAt": "2025-07-04T22:10:00Z", "amount": 5})
    assert record.occurred_on == "2025-07-04"


def test_transaction_record_passes_through_unchanged(make_record):
    record = make_record()
    assert normalize_record(record) is record


def test_wire_roundtrip_uses_camel_case(make_record):
    record = make_record(payment_method=PaymentMethod.CREDIT)
    wire = record.to_wire()

    assert wire["amountMinorUnits"] == record.amount_minor_units
    assert wire["occurredOn"] == record.occurred_on
    assert wire["paymentMethod"] == "credit"
    assert normalize_record(wire) == record


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1500, 1500),
        (-1500, 1500),
        ("2500", 2500),
        ("12.6", 13),
        (99.4, 99),
        (None, 0),
        ("abc", 0),
        (True, 0),
        (float("nan"), 0),
    ],
)
def test_coerce_amount(value, expected):
    assert coerce_amount(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("RECEITA", TransactionKind.INCOME),
        ("income", TransactionKind.INCOME),
        ("EXPENSE", TransactionKind.EXPENSE),
        ("despesa", TransactionKind.EXPENSE),
        (None, TransactionKind.EXPENSE),
        ("transfer", TransactionKind.EXPENSE),
    ],
)
def test_coerce_kind(value, expected):
    assert coerce_kind(value) is expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2026-02-01", "2026-02-01"),
        ("2026-2-1", "2026-02-01"),
        ("2026-02-01T23:59:59Z", "2026-02-01"),
        (date(2026, 2, 1), "2026-02-01"),
        ("2026-02-30", None),
        ("yesterday", None),
        (20260201, None),
    ],
)
def test_coerce_date(value, expected):
    assert coerce_date(value) == expected


def test_normalize_records_rejects_non_arrays():
    assert normalize_records({"id": "x"}) == []
    assert normalize_records(None) == []


def test_record_model_rejects_negative_amount(make_record):
    with pytest.raises(ValueError):
        make_record(amount_minor_units=-1)


def test_record_model_is_frozen(make_record):
    record = make_record()
    with pytest.raises(ValueError):
        record.title = "changed"  # type: ignore[misc]


def test_month_key_and_credit_flag(make_record):
    record = make_record(occurred_on="2026-09-30", payment_method=PaymentMethod.CREDIT)
    assert record.month_key == "2026-09"
    assert record.is_credit_spend
    assert not make_record(kind=TransactionKind.INCOME).is_credit_spend
    assert isinstance(record, TransactionRecord)
