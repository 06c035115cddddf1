"""Balance and report commands for viewing derived figures."""

import sqlite3
import sys
from datetime import date

from rich.console import Console

from fingestor.commands.admin import require_database
from fingestor.commands.recurring import catch_up, report_catch_up, resolve_today
from fingestor.dates import current_month, month_range
from fingestor.domain.balance import compute_savings_balance, summarize
from fingestor.domain.models import Money, Month, format_money
from fingestor.domain.report import (
    AlertStatus,
    CategoryReport,
    calculate_histogram_bar_length,
    create_category_reports,
    evaluate_alerts,
    expenses_by_category,
    filter_by_month,
)
from fingestor.domain.savings import allocation_preview
from fingestor.store.queries import get_app_config, get_goals, get_transactions

console = Console()


def compute_report_period(all: bool, month: Month | None, today: date) -> tuple[str, Month | None]:
    """Compute the period label and month filter for a report.

    Returns:
        Tuple of (period_display, report_month). report_month is None for all time.

    Raises:
        ValueError: If month is not in YYYY-MM format.
    """
    if all:
        return "All Time", None
    report_month = month or current_month(today)
    _, _, label = month_range(report_month)
    return label, report_month


def balance_command(offline: bool = False) -> None:
    """Show current balance, transfers and savings, after catching up recurring transactions."""
    db_path = require_database()

    try:
        today = resolve_today(offline)
        config = get_app_config(db_path)
        report_catch_up(catch_up(db_path, today), config.currency)

        summary = summarize(get_transactions(db_path))
        savings = compute_savings_balance(get_goals(db_path))
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    currency = config.currency
    balance_style = "green" if summary.balance >= 0 else "red"

    console.print(f"\n[bold]Hello, {config.user_name}[/bold] [dim]({today.isoformat()})[/dim]\n")
    console.print(f"  Income:        [green]{format_money(summary.income, currency)}[/green]")
    console.print(f"  Expenses:      [red]{format_money(summary.expense, currency)}[/red]")
    console.print(f"  Transfers in:  {format_money(summary.transfer_in, currency)}")
    console.print(f"  Transfers out: {format_money(summary.transfer_out, currency)}")
    console.print(f"\n  [bold]Balance:[/bold] [{balance_style}]{format_money(summary.balance, currency)}[/{balance_style}]")
    console.print(f"  [bold]Savings:[/bold] [cyan]{format_money(savings, currency)}[/cyan]")

    preview = allocation_preview(summary.balance, config.allocation_percentage)
    if preview > 0:
        console.print(f"\n[dim]Allocating to a goal would move {format_money(preview, currency)}[/dim]")


def render_category_line(
    cat_report: CategoryReport, histogram: bool, max_amount: Money | None, bar_width: int, currency: str
) -> None:
    """Render single spending category line."""
    amount_display = format_money(cat_report.amount, currency)

    if histogram and max_amount:
        bar_length = calculate_histogram_bar_length(cat_report.amount, max_amount, bar_width)
        bar = "█" * bar_length
        console.print(f"  {cat_report.category:24} {amount_display:>12} {cat_report.percentage:5.1f}% {bar}")
    else:
        console.print(f"  {cat_report.category}: {amount_display} ({cat_report.percentage:.1f}%)")


def render_alert_line(status: AlertStatus, currency: str) -> None:
    """Render one spending alert with colour by state."""
    spent = format_money(status.spent, currency)
    limit = format_money(status.alert.limit, currency)
    if status.exceeded:
        console.print(f"  [red]⚠ {status.alert.category}: {spent} / {limit}[/red]")
    elif status.spent * 10 > status.alert.limit * 9:
        console.print(f"  [yellow]{status.alert.category}: {spent} / {limit}[/yellow]")
    else:
        console.print(f"  [green]{status.alert.category}: {spent} / {limit}[/green]")


def report_command(
    sort_by: str = "value",
    histogram: bool = True,
    all: bool = False,
    month: str | None = None,
    offline: bool = False,
) -> None:
    """Show spending by category and the state of spending alerts."""
    db_path = require_database()

    try:
        today = resolve_today(offline)
        config = get_app_config(db_path)
        report_catch_up(catch_up(db_path, today), config.currency)
        transactions = get_transactions(db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    try:
        period, report_month = compute_report_period(all, Month(month) if month else None, today)
    except ValueError:
        console.print(f"[red]Invalid month '{month}' (expected YYYY-MM)[/red]")
        sys.exit(1)

    in_period = filter_by_month(transactions, report_month) if report_month else transactions
    reports = create_category_reports(expenses_by_category(in_period), sort_by)

    console.print(f"[bold cyan]{period}[/bold cyan]\n")

    if not reports:
        console.print("[dim]No spending in this period[/dim]")
    else:
        console.print("[bold red]Spending by category:[/bold red]\n")
        max_amount = Money(max(r.amount for r in reports)) if histogram else None
        for cat_report in reports:
            render_category_line(cat_report, histogram, max_amount, 30, config.currency)
        total = Money(sum(r.amount for r in reports))
        console.print(f"\n  [bold]Total spending:[/bold] {format_money(total, config.currency)}\n")

    if config.alerts:
        alert_month = report_month or current_month(today)
        console.print(f"[bold]Alerts ({alert_month}):[/bold]\n")
        for status in evaluate_alerts(transactions, config.alerts, alert_month):
            render_alert_line(status, config.currency)
