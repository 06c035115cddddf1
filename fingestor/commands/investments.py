"""Investment commands (add, delete, list, import, export, summary)."""

import sqlite3
import sys
from datetime import date
from pathlib import Path
from typing import cast

import pandas as pd
from rich.console import Console
from rich.table import Table

from fingestor.commands.admin import require_database
from fingestor.commands.transactions import READ_ERRORS, normalize_date, read_rows, write_rows
from fingestor.domain.investments import (
    EXPORT_HEADERS,
    parse_investment_row,
    search_investments,
    shares_for,
    summarize_portfolio,
    to_export_row,
    validate_investment,
)
from fingestor.domain.models import Investment, InvestmentAction, format_money, to_money
from fingestor.domain.recurrence import new_id
from fingestor.domain.transactions import is_investment_export, is_transaction_export
from fingestor.notifications import notify
from fingestor.store.queries import (
    add_investment,
    delete_investment,
    get_app_config,
    get_investments,
    import_investments,
)

console = Console()


def add_command(
    name: str,
    invested: str,
    type: str = "Market buy",
    price: float = 0.0,
    shares: float | None = None,
    ticker: str | None = None,
    isin: str | None = None,
    on: str | None = None,
    notes: str | None = None,
) -> None:
    """Record an investment trade or cash movement.

    Shares are derived from invested value and price when not given.
    """
    db_path = require_database()

    try:
        invested_value = to_money(invested)
        inv_date = normalize_date(on) if on else date.today()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    valid, error = validate_investment(name, type, invested_value)
    if not valid:
        console.print(f"[red]{error}[/red]")
        sys.exit(1)

    inv = Investment(
        id=new_id(),
        name=name.strip(),
        type=cast(InvestmentAction, type),
        date=inv_date,
        price_per_share=price,
        invested_value=invested_value,
        shares=shares if shares is not None else shares_for(invested_value, price),
        ticker=ticker.upper() if ticker else None,
        isin=isin.upper() if isin else None,
        notes=notes,
    )

    try:
        add_investment(inv, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    notify(console, f"Recorded! (ID: {inv.id})", "success")


def delete_command(investment_id: str) -> None:
    """Delete an investment by id."""
    db_path = require_database()

    try:
        if not delete_investment(investment_id, db_path):
            notify(console, f"Investment {investment_id} not found", "error")
            sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    notify(console, "Investment removed", "info")


def list_command(search: str = "") -> None:
    """List investments, newest entry first."""
    db_path = require_database()

    try:
        config = get_app_config(db_path)
        investments = search_investments(get_investments(db_path), search)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if not investments:
        console.print("[yellow]No investments found[/yellow]")
        return

    table = Table(title="Investments")
    table.add_column("ID", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Ticker", style="magenta")
    table.add_column("Action")
    table.add_column("Price", justify="right")
    table.add_column("Shares", justify="right")
    table.add_column("Value", justify="right")

    for inv in investments:
        table.add_row(
            inv.id,
            inv.date.isoformat(),
            inv.name,
            inv.ticker or "[dim]-[/dim]",
            inv.type,
            f"{inv.price_per_share:,.2f}",
            f"{inv.shares:g}",
            format_money(inv.invested_value, config.currency),
        )

    console.print(table)


def summary_command() -> None:
    """Show cash balance, net invested and allocation by holding."""
    db_path = require_database()

    try:
        config = get_app_config(db_path)
        summary = summarize_portfolio(get_investments(db_path))
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    currency = config.currency
    console.print("\n[bold]Portfolio[/bold]")
    console.print(f"  Net invested: [cyan]{format_money(summary.net_invested, currency)}[/cyan]")
    console.print(f"  Cash balance: {format_money(summary.cash_balance, currency)}")
    console.print(f"  Dividends:    [green]{format_money(summary.dividends, currency)}[/green]")
    console.print(f"  Deposits:     {format_money(summary.deposits, currency)}")
    console.print(f"  Withdrawals:  {format_money(summary.withdrawals, currency)}")

    if summary.allocation:
        table = Table(title="Allocation")
        table.add_column("Holding", style="magenta")
        table.add_column("Bought", justify="right")
        for holding, amount in sorted(summary.allocation.items(), key=lambda item: item[1], reverse=True):
            table.add_row(holding, format_money(amount, currency))
        console.print(table)


def import_command(file_path: str) -> None:
    """Import investments from a CSV or Excel file (app export or broker history)."""
    db_path = require_database()
    path = Path(file_path).expanduser()

    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        sys.exit(1)

    try:
        headers, rows = read_rows(path)
    except READ_ERRORS as e:
        console.print(f"[red]Could not read {path}: {e}[/red]")
        sys.exit(1)

    if not rows:
        notify(console, "Empty file.", "error")
        sys.exit(1)

    if not is_investment_export(headers) and is_transaction_export(headers):
        notify(console, "This looks like a transaction file. Use 'fingestor import' instead.", "error")
        sys.exit(1)

    today = date.today()
    imported = [inv for inv in (parse_investment_row(row, today, normalize_date) for row in rows) if inv is not None]

    if not imported:
        notify(console, "No valid investments found in file", "info")
        return

    try:
        inserted, skipped = import_investments(imported, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    notify(console, f"{inserted} entries imported", "success")
    if skipped:
        console.print(f"[dim]Skipped {skipped} already imported[/dim]")


def export_command(file_path: str) -> None:
    """Export all investments to CSV, or to Excel for .xlsx paths."""
    db_path = require_database()
    path = Path(file_path).expanduser()

    try:
        investments = get_investments(db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    frame = pd.DataFrame([to_export_row(i) for i in investments], columns=EXPORT_HEADERS)
    try:
        write_rows(frame, path, sheet_name="Investimentos")
    except (OSError, ValueError) as e:
        console.print(f"[red]Export failed: {e}[/red]")
        sys.exit(1)

    notify(console, f"Exported {len(investments)} investments to {path}", "success")
