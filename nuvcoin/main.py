from __future__ import annotations

import sys
from contextlib import contextmanager
from datetime import date
from typing import Generator, List, Optional

import typer

from nuvcoin.analytics.aggregation import (
    compare_to_previous_month,
    group_by_month,
    group_expenses_by_category,
    summarize,
)
from nuvcoin.analytics.periods import ReportPeriod, fill_month_gaps, filter_by_period
from nuvcoin.config import Settings, get_settings
from nuvcoin.domain.models import (
    Category,
    PaymentMethod,
    TransactionKind,
    TransactionRecord,
    TransactionStatus,
)
from nuvcoin.infrastructure.remote import HttpRemoteProvider
from nuvcoin.infrastructure.store import JsonFileStore
from nuvcoin.reporter import (
    print_categories,
    print_comparison,
    print_monthly,
    print_records,
    print_summary,
)
from nuvcoin.sync.cache import SyncCache
from nuvcoin.utils.formatting import (
    format_brl,
    make_id,
    now_iso,
    parse_amount_to_cents,
    today_iso,
)
from nuvcoin.utils.logging import configure_logging

app = typer.Typer(help="nuvcoin personal finance CLI.")

PERIOD_OPTION = typer.Option(
    ReportPeriod.ALL, "--period", "-p", help="Restrict to MONTH, LAST_3, YEAR or ALL."
)


@contextmanager
def open_cache(settings: Optional[Settings] = None) -> Generator[SyncCache, None, None]:
    """
    Build the process-wide cache from settings and close it on exit.

    Closing drains background remote calls, so a short-lived CLI process
    does not exit before its optimistic writes reach the API.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level)
    store = JsonFileStore(settings.data_dir, poll_interval=settings.store_poll_interval)
    remote = HttpRemoteProvider() if settings.use_api else None
    try:
        with SyncCache(store, remote) as cache:
            yield cache
    finally:
        if remote is not None:
            remote.close()


def _load(cache: SyncCache) -> List[TransactionRecord]:
    cache.list()
    # A one-shot process gets exactly one chance to hydrate.
    cache.wait_idle(timeout=get_settings().http_timeout)
    return cache.list()


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    api = settings.api_base_url if settings.use_api else "disabled"
    typer.echo(
        f"data_dir={settings.data_dir} key={settings.storage_key} api={api} "
        f"sync_min_interval={settings.sync_min_interval}s echo_window={settings.echo_window}s"
    )


@app.command("list")
def list_records(period: ReportPeriod = PERIOD_OPTION) -> None:
    """
    List transactions.
    """
    with open_cache() as cache:
        print_records(filter_by_period(_load(cache), period))


@app.command()
def add(
    kind: TransactionKind = typer.Argument(..., help="INCOME or EXPENSE."),
    amount: str = typer.Argument(..., help='Amount in reais, pt-BR format (e.g. "1.234,56").'),
    title: str = typer.Option("", "--title", "-t", help="Free-text label."),
    category: Category = typer.Option(Category.OUTROS, "--category", "-c"),
    method: PaymentMethod = typer.Option(PaymentMethod.PIX, "--method", "-m"),
    status: TransactionStatus = typer.Option(TransactionStatus.PAID, "--status"),
    occurred_on: Optional[str] = typer.Option(
        None, "--date", "-d", help="YYYY-MM-DD (defaults to today)."
    ),
    record_id: Optional[str] = typer.Option(None, "--id", help="Explicit id (upserts)."),
) -> None:
    """
    Record an income or expense.
    """
    cents = parse_amount_to_cents(amount)
    if cents <= 0:
        typer.echo(f"Invalid amount: {amount!r}", err=True)
        raise typer.Exit(code=2)
    if occurred_on is not None:
        try:
            date.fromisoformat(occurred_on)
        except ValueError:
            typer.echo(f"Invalid date: {occurred_on!r} (expected YYYY-MM-DD)", err=True)
            raise typer.Exit(code=2) from None

    record = TransactionRecord(
        id=record_id or make_id(),
        kind=kind,
        title=title,
        category=category,
        amount_minor_units=cents,
        occurred_on=occurred_on or today_iso(),
        created_at=now_iso(),
        payment_method=method,
        status=status,
    )
    with open_cache() as cache:
        snapshot = cache.add(record)
    typer.echo(
        f"Added {record.kind.value} {format_brl(cents)} ({record.id}); "
        f"{len(snapshot)} transactions stored."
    )


@app.command()
def remove(record_id: str = typer.Argument(..., help="Id of the transaction to delete.")) -> None:
    """
    Delete a transaction by id.
    """
    with open_cache() as cache:
        before = len(cache.list())
        snapshot = cache.remove(record_id)
    if len(snapshot) == before:
        typer.echo(f"No transaction with id {record_id}.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Removed {record_id}; {len(snapshot)} transactions stored.")


@app.command()
def summary(period: ReportPeriod = PERIOD_OPTION) -> None:
    """
    Show income, expense, credit spend and balance.
    """
    with open_cache() as cache:
        records = filter_by_period(_load(cache), period)
    print_summary(summarize(records), title=f"Summary ({period.value})")


@app.command()
def compare(
    reference: Optional[str] = typer.Option(
        None, "--reference", "-r", help="Any date in the month to compare (defaults to today)."
    ),
) -> None:
    """
    Compare a month against the previous one.
    """
    with open_cache() as cache:
        records = _load(cache)
    print_comparison(compare_to_previous_month(records, reference or today_iso()))


@app.command()
def categories(period: ReportPeriod = PERIOD_OPTION) -> None:
    """
    Break expenses down by category.
    """
    with open_cache() as cache:
        records = filter_by_period(_load(cache), period)
    print_categories(group_expenses_by_category(records))


@app.command()
def months(
    period: ReportPeriod = PERIOD_OPTION,
    fill: bool = typer.Option(True, "--fill/--no-fill", help="Zero-fill months with no records."),
) -> None:
    """
    Show income and expense per month.
    """
    with open_cache() as cache:
        records = filter_by_period(_load(cache), period)
    series = sorted(group_by_month(records), key=lambda m: m.month)
    print_monthly(fill_month_gaps(series) if fill else series)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
