from __future__ import annotations

from datetime import date

import pytest

from nuvcoin.utils.formatting import (
    format_brl,
    format_pct,
    make_id,
    parse_amount_to_cents,
    today_iso,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1.234,56", 123456),
        ("10", 1000),
        ("0,5", 50),
        ("R$ 99,99", 9999),
        ("0,005", 1),
        ("0", 0),
        ("-5,00", 0),
        ("", 0),
        ("abc", 0),
    ],
)
def test_parse_amount_to_cents(text, expected):
    assert parse_amount_to_cents(text) == expected


@pytest.mark.parametrize(
    ("cents", "expected"),
    [
        (0, "R$ 0,00"),
        (5, "R$ 0,05"),
        (123456, "R$ 1.234,56"),
        (100000000, "R$ 1.000.000,00"),
        (-2550, "-R$ 25,50"),
    ],
)
def test_format_brl(cents, expected):
    assert format_brl(cents) == expected


def test_format_pct():
    assert format_pct(None) == "—"
    assert format_pct(-12.345) == "12.3%"


def test_make_id_is_unique():
    assert len({make_id() for _ in range(100)}) == 100


def test_today_iso_is_zero_padded():
    assert today_iso(date(2026, 3, 7)) == "2026-03-07"
