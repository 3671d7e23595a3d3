"""
Sample data generator for nuvcoin.

Produces a deterministic pseudo-random set of income and expense records
spread over the last few months and writes them into the local durable
store, replacing whatever was there.
"""

from __future__ import annotations

import random
import sys
import time
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List

import typer

from nuvcoin.analytics.periods import shift_month
from nuvcoin.config import get_settings
from nuvcoin.domain.models import (
    Category,
    PaymentMethod,
    TransactionKind,
    TransactionRecord,
    TransactionStatus,
)
from nuvcoin.infrastructure.store import JsonFileStore, save_records

app = typer.Typer(help="Generate sample transactions into the local store.")

INCOME_CATEGORIES = [Category.SALARIO, Category.FREELANCE, Category.VENDAS]
EXPENSE_CATEGORIES = [
    Category.ALIMENTACAO,
    Category.TRANSPORTE,
    Category.MORADIA,
    Category.SAUDE,
    Category.LAZER,
    Category.OUTROS,
]
EXPENSE_TITLES = {
    Category.ALIMENTACAO: ["Mercado", "Padaria", "Restaurante"],
    Category.TRANSPORTE: ["Uber", "Combustível", "Metrô"],
    Category.MORADIA: ["Aluguel", "Condomínio", "Energia"],
    Category.SAUDE: ["Farmácia", "Consulta"],
    Category.LAZER: ["Cinema", "Streaming", "Show"],
    Category.OUTROS: ["Presente", "Diversos"],
}


def _generate_records(
    months: int, per_month: int, seed: int, today: date
) -> List[TransactionRecord]:
    rng = random.Random(seed)
    created_at = datetime.now(timezone.utc).isoformat()
    records: List[TransactionRecord] = []

    for offset in range(months - 1, -1, -1):
        year, month = shift_month(today.year, today.month, -offset)
        last_day = today.day if offset == 0 else 28
        records.append(
            TransactionRecord(
                id=f"seed-{year:04d}{month:02d}-salary",
                kind=TransactionKind.INCOME,
                title="Salário",
                category=Category.SALARIO,
                amount_minor_units=rng.randint(450_000, 650_000),
                occurred_on=date(year, month, min(5, last_day)).isoformat(),
                created_at=created_at,
                payment_method=PaymentMethod.PIX,
                status=TransactionStatus.PAID,
            )
        )
        for index in range(per_month):
            is_income = rng.random() < 0.1
            category = rng.choice(INCOME_CATEGORIES[1:] if is_income else EXPENSE_CATEGORIES)
            title = category.value if is_income else rng.choice(EXPENSE_TITLES[category])
            records.append(
                TransactionRecord(
                    id=f"seed-{year:04d}{month:02d}-{index:03d}",
                    kind=TransactionKind.INCOME if is_income else TransactionKind.EXPENSE,
                    title=title,
                    category=category,
                    amount_minor_units=rng.randint(1_000, 80_000),
                    occurred_on=date(year, month, rng.randint(1, last_day)).isoformat(),
                    created_at=created_at,
                    payment_method=rng.choice(list(PaymentMethod)),
                    status=rng.choice([TransactionStatus.PAID, TransactionStatus.PENDING]),
                )
            )

    return records


@app.command()
def main(
    months: int = typer.Option(6, "--months", "-n", help="Number of months to cover."),
    per_month: int = typer.Option(20, "--per-month", help="Extra records per month."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    data_dir: Path | None = typer.Option(
        None, "--data-dir", help="Store directory (defaults to settings.data_dir)."
    ),
) -> None:
    """
    Generate sample transactions and write them to the local store.
    """
    settings = get_settings()
    start = time.perf_counter()
    records = _generate_records(months, per_month, seed, date.today())

    store = JsonFileStore(data_dir or settings.data_dir)
    save_records(store, settings.storage_key, records)
    duration = time.perf_counter() - start
    typer.echo(
        f"Wrote {len(records):,} records to {store.directory} "
        f"(key={settings.storage_key}, seed={seed}) in {duration:.2f}s"
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
