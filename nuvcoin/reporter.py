from __future__ import annotations

from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from nuvcoin.analytics.periods import month_label
from nuvcoin.domain.models import (
    CategoryTotal,
    FinanceSummary,
    MetricDelta,
    MonthComparisonResult,
    MonthlyTotals,
    TransactionKind,
    TransactionRecord,
    TrendDirection,
)
from nuvcoin.utils.formatting import format_brl, format_pct

_ARROWS = {TrendDirection.UP: "↑", TrendDirection.DOWN: "↓", TrendDirection.FLAT: "—"}


def trend_line(delta: MetricDelta) -> str:
    """Short "vs previous month" caption, e.g. ``↑ 12.5%``."""
    if delta.pct is None:
        return "—"
    return f"{_ARROWS[delta.direction]} {format_pct(delta.pct)}"


def print_records(records: Sequence[TransactionRecord], console: Optional[Console] = None) -> None:
    """Render the transaction list, newest date first."""
    console = console or Console()

    if not records:
        console.print("[yellow]No transactions recorded.[/yellow]")
        return

    table = Table(title="Transactions", box=box.ROUNDED)
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Category", style="magenta")
    table.add_column("Method", style="blue")
    table.add_column("Amount", justify="right")
    table.add_column("ID", style="dim", overflow="fold")

    for record in sorted(records, key=lambda r: r.occurred_on, reverse=True):
        if record.kind is TransactionKind.INCOME:
            amount = f"[green]+{format_brl(record.amount_minor_units)}[/green]"
        else:
            amount = f"[red]-{format_brl(record.amount_minor_units)}[/red]"
        table.add_row(
            record.occurred_on,
            record.title,
            record.category.value,
            record.payment_method.value,
            amount,
            record.id,
        )

    console.print(table)


def print_summary(
    summary: FinanceSummary,
    title: str = "Summary",
    console: Optional[Console] = None,
) -> None:
    console = console or Console()
    balance_style = "bold green" if summary.balance >= 0 else "bold red"

    table = Table(title=title, box=box.ROUNDED, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Income", f"[green]{format_brl(summary.income)}[/green]")
    table.add_row("Expense", f"[red]{format_brl(summary.expense)}[/red]")
    table.add_row("Credit", f"[yellow]{format_brl(summary.credit)}[/yellow]")
    table.add_row("Balance", f"[{balance_style}]{format_brl(summary.balance)}[/{balance_style}]")
    console.print(table)


def print_comparison(result: MonthComparisonResult, console: Optional[Console] = None) -> None:
    """Render current vs previous month with deltas and trend arrows."""
    console = console or Console()

    table = Table(
        title=(
            f"{month_label(result.current_month_key)} vs "
            f"{month_label(result.previous_month_key)}"
        ),
        box=box.ROUNDED,
        caption="% is undefined (—) when the previous month is zero",
    )
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column(result.current_month_key, justify="right", style="bold")
    table.add_column(result.previous_month_key, justify="right", style="dim")
    table.add_column("Δ", justify="right")
    table.add_column("Trend", justify="right")

    for name, delta in (
        ("Income", result.income),
        ("Expense", result.expense),
        ("Credit", result.credit),
        ("Balance", result.balance),
    ):
        table.add_row(
            name,
            format_brl(delta.current),
            format_brl(delta.previous),
            format_brl(delta.delta),
            trend_line(delta),
        )

    console.print(table)


def print_categories(totals: Sequence[CategoryTotal], console: Optional[Console] = None) -> None:
    """Render expenses per category, largest first, with their share of the total."""
    console = console or Console()

    if not totals:
        console.print("[yellow]No expenses to break down.[/yellow]")
        return

    grand_total = sum(t.total for t in totals)
    table = Table(title="Expenses by category", box=box.ROUNDED, caption="Sorted by total")
    table.add_column("Category", style="magenta")
    table.add_column("Total", justify="right", style="red")
    table.add_column("Share", justify="right")

    for item in sorted(totals, key=lambda t: t.total, reverse=True):
        share = item.total / grand_total * 100 if grand_total else 0.0
        table.add_row(item.category.value, format_brl(item.total), f"{share:.1f}%")

    console.print(table)


def print_monthly(series: Sequence[MonthlyTotals], console: Optional[Console] = None) -> None:
    console = console or Console()

    if not series:
        console.print("[yellow]No monthly data.[/yellow]")
        return

    table = Table(title="Monthly totals", box=box.ROUNDED)
    table.add_column("Month", style="cyan", no_wrap=True)
    table.add_column("Income", justify="right", style="green")
    table.add_column("Expense", justify="right", style="red")
    table.add_column("Net", justify="right")

    for item in series:
        net = item.income - item.expense
        net_style = "green" if net >= 0 else "red"
        table.add_row(
            month_label(item.month),
            format_brl(item.income),
            format_brl(item.expense),
            f"[{net_style}]{format_brl(net)}[/{net_style}]",
        )

    console.print(table)


__all__ = [
    "print_categories",
    "print_comparison",
    "print_monthly",
    "print_records",
    "print_summary",
    "trend_line",
]
