"""Transaction commands (add, delete, list, import, export)."""

import sqlite3
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import cast
from zipfile import BadZipFile

import pandas as pd
from rich.console import Console
from rich.table import Table

from fingestor.commands.admin import require_database
from fingestor.commands.recurring import catch_up, report_catch_up, resolve_today
from fingestor.domain.models import (
    OTHER,
    CategoryName,
    Description,
    Frequency,
    Month,
    Transaction,
    TransactionType,
    format_money,
    to_money,
)
from fingestor.domain.recurrence import create_schedule
from fingestor.domain.report import filter_by_month
from fingestor.domain.savings import apply_savings_policies
from fingestor.domain.transactions import (
    EXPORT_HEADERS,
    create_transaction,
    is_investment_export,
    parse_transaction_row,
    to_export_row,
    validate_transaction,
)
from fingestor.notifications import notify
from fingestor.store.queries import (
    add_transaction,
    delete_transaction,
    get_app_config,
    get_goals,
    get_transactions,
    import_transactions,
    save_app_config,
)

console = Console()


def normalize_date(raw_date: str) -> date:
    """Parse a user or file supplied date.

    Uses pandas.to_datetime for robust date parsing - handles ISO, European,
    American, and various other date formats automatically. Bank exports are
    notoriously inconsistent, so we need fuzzy matching.

    Args:
        raw_date: Raw date string.

    Returns:
        Calendar date.

    Raises:
        ValueError: If date cannot be parsed.
    """
    text = raw_date.strip()
    try:
        if len(text) >= 10 and text[4] == "-":
            return date.fromisoformat(text[:10])
        return pd.to_datetime(text, dayfirst=True).date()
    except (ValueError, pd.errors.ParserError) as e:
        raise ValueError(f"Could not parse date '{raw_date}': {e}") from e


EXCEL_SUFFIXES = (".xlsx", ".xls")

# Errors pandas and the Excel readers raise for unreadable or malformed files
READ_ERRORS = (OSError, ValueError, BadZipFile, pd.errors.ParserError, pd.errors.EmptyDataError)


def is_excel(path: Path) -> bool:
    """Check whether a path names an Excel workbook."""
    return path.suffix.lower() in EXCEL_SUFFIXES


def read_rows(path: Path) -> tuple[list[str], list[dict[str, str]]]:
    """Read a CSV file or the first sheet of an Excel workbook as strings.

    Returns:
        Tuple of (headers, rows).
    """
    if is_excel(path):
        frame = pd.read_excel(path, dtype=str, keep_default_na=False)
    else:
        frame = pd.read_csv(path, dtype=str, keep_default_na=False, sep=None, engine="python")
    return list(frame.columns), frame.to_dict(orient="records")


def write_rows(frame: pd.DataFrame, path: Path, sheet_name: str = "Sheet1") -> None:
    """Write rows as CSV, or as an Excel workbook for .xlsx paths.

    Raises:
        ValueError: For legacy .xls paths, which cannot be written.
        OSError: If the file cannot be written.
    """
    suffix = path.suffix.lower()
    if suffix == ".xls":
        raise ValueError("Excel exports are written as .xlsx, not .xls")
    if suffix == ".xlsx":
        frame.to_excel(path, index=False, sheet_name=sheet_name, engine="openpyxl")
    else:
        frame.to_csv(path, index=False)


def add_command(
    description: str,
    amount: str,
    type: str = "expense",
    category: str | None = None,
    on: str | None = None,
    repeat: str | None = None,
    times: int | None = None,
    until: str | None = None,
) -> None:
    """Record a transaction, optionally marking it recurring.

    Args:
        description: Transaction description.
        amount: Amount in major units (always positive).
        type: income, expense or transfer.
        category: Category name (default "Other").
        on: Transaction date (default today).
        repeat: Frequency when the transaction recurs.
        times: Stop after this many generated occurrences.
        until: Stop after this date.
    """
    db_path = require_database()

    try:
        amount_cents = to_money(amount)
        txn_date = normalize_date(on) if on else date.today()
        until_date = normalize_date(until) if until else None
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        console.print("[dim]Accepted date formats: YYYY-MM-DD, DD/MM/YYYY, DD-MM-YYYY, etc.[/dim]")
        sys.exit(1)

    valid, error = validate_transaction(description, amount_cents, type)
    if not valid:
        console.print(f"[red]{error}[/red]")
        sys.exit(1)

    if times is not None and until:
        console.print("[red]Use either --times or --until, not both[/red]")
        sys.exit(1)

    schedule = None
    if repeat:
        schedule, error = create_schedule(
            description=Description(description.strip()),
            amount=amount_cents,
            type=cast(TransactionType, type),
            category=CategoryName(category) if category else OTHER,
            frequency=cast(Frequency, repeat),
            start_date=txn_date,
            end_condition="date" if until_date else "count",
            occ_count=times,
            occ_until=until_date,
        )
        if error:
            console.print(f"[red]{error}[/red]")
            sys.exit(1)

    txn = create_transaction(txn_date, description, amount_cents, cast(TransactionType, type), category)

    try:
        config = get_app_config(db_path)
        result = apply_savings_policies(txn, get_goals(db_path))
        add_transaction(txn, result.goals if result.withdrawn else None, db_path)

        notify(console, "Transaction recorded!", "success")
        console.print(f"  ID: [dim]{txn.id}[/dim]")
        console.print(f"  Date: {txn.date.isoformat()}")
        console.print(f"  Description: {txn.description}")
        console.print(f"  Amount: {format_money(txn.amount, config.currency)} ({txn.type})")
        console.print(f"  Category: {txn.category}")

        if result.withdrawn:
            notify(
                console,
                f"Savings reduced by {format_money(result.withdrawn, config.currency)} across goals",
                "info",
            )

        if schedule is not None:
            save_app_config(
                replace(config, recurring_schedules=(*config.recurring_schedules, schedule)),
                db_path,
            )
            notify(console, f"Repeats {schedule.frequency} (schedule {schedule.id})", "info")
            report_catch_up(catch_up(db_path, resolve_today()), config.currency)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def delete_command(transaction_id: str) -> None:
    """Delete a transaction by id."""
    db_path = require_database()

    try:
        if not delete_transaction(transaction_id, db_path):
            notify(console, f"Transaction {transaction_id} not found", "error")
            sys.exit(1)
        notify(console, "Removed.", "info")
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def list_command(
    limit: int = 50,
    all: bool = False,
    month: str | None = None,
) -> None:
    """List transactions, newest first."""
    db_path = require_database()

    try:
        config = get_app_config(db_path)
        transactions = get_transactions(db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if month:
        try:
            transactions = filter_by_month(transactions, Month(month))
        except ValueError:
            console.print(f"[red]Invalid month '{month}' (expected YYYY-MM)[/red]")
            sys.exit(1)

    transactions = sorted(transactions, key=lambda t: t.date, reverse=True)
    if not all:
        transactions = transactions[:limit]

    if not transactions:
        console.print("[yellow]No transactions found[/yellow]")
        return

    title = f"Transactions (showing all {len(transactions)})" if all else f"Transactions (showing {len(transactions)})"
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Amount", justify="right")
    table.add_column("Type")
    table.add_column("Category", style="magenta")

    for txn in transactions:
        table.add_row(
            txn.id,
            txn.date.isoformat(),
            txn.description,
            format_amount(txn, config.currency),
            txn.type,
            txn.category,
        )

    console.print(table)


def format_amount(txn: Transaction, currency: str) -> str:
    """Colour an amount by transaction type."""
    amount = format_money(txn.amount, currency)
    if txn.type == "income":
        return f"[green]+{amount}[/green]"
    if txn.type == "expense":
        return f"[red]-{amount}[/red]"
    return f"[blue]{amount}[/blue]"


def import_command(file_path: str) -> None:
    """Import transactions from a CSV or Excel file."""
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

    if is_investment_export(headers):
        notify(console, "This looks like an investment file. Use 'fingestor invest import' instead.", "error")
        sys.exit(1)

    today = date.today()
    parsed = [parse_transaction_row(row, today, normalize_date) for row in rows]
    imported = [t for t in parsed if t is not None]
    invalid = len(parsed) - len(imported)

    if not imported:
        notify(console, "No valid transactions found in file", "info")
        return

    try:
        inserted, skipped = import_transactions(imported, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    notify(console, f"{inserted} items imported", "success")
    if skipped:
        console.print(f"[dim]Skipped {skipped} already imported[/dim]")
    if invalid:
        console.print(f"[dim]Skipped {invalid} invalid rows[/dim]")


def export_command(file_path: str) -> None:
    """Export all transactions to CSV, or to Excel for .xlsx paths."""
    db_path = require_database()
    path = Path(file_path).expanduser()

    try:
        transactions = get_transactions(db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    frame = pd.DataFrame([to_export_row(t) for t in transactions], columns=EXPORT_HEADERS)
    try:
        write_rows(frame, path, sheet_name="Extrato")
    except (OSError, ValueError) as e:
        console.print(f"[red]Export failed: {e}[/red]")
        sys.exit(1)

    notify(console, f"Exported {len(transactions)} transactions to {path}", "success")
