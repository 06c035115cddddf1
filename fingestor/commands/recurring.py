"""Recurring schedule commands and the catch-up pass run before balance reads."""

import sqlite3
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

from rich.console import Console
from rich.table import Table

from fingestor.commands.admin import require_database
from fingestor.config import get_time_source
from fingestor.domain.models import format_money
from fingestor.domain.recurrence import RecurrenceResult, process_recurring, schedule_cursor, stop_schedule
from fingestor.notifications import notify
from fingestor.store.queries import apply_recurring_batch, get_app_config, save_app_config
from fingestor.timesource import fetch_today

console = Console()


def resolve_today(offline: bool = False) -> date:
    """Get today's date from the configured time source, or the local clock."""
    if offline:
        return date.today()
    settings = get_time_source()
    if not settings.get("enabled", True):
        return date.today()
    return fetch_today(settings["url"], settings["timeout"])


def catch_up(db_path: Path, today: date) -> RecurrenceResult:
    """Generate every due recurring transaction and store the batch atomically.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    config = get_app_config(db_path)
    result = process_recurring(config.recurring_schedules, today)
    if result.transactions or list(config.recurring_schedules) != result.schedules:
        apply_recurring_batch(result.transactions, result.schedules, db_path)
    return result


def report_catch_up(result: RecurrenceResult, currency: str) -> None:
    """Print what a catch-up pass generated."""
    if not result.transactions:
        return
    notify(console, f"{len(result.transactions)} recurring transaction(s) generated", "success")
    for txn in result.transactions:
        console.print(f"  [dim]{txn.date.isoformat()}[/dim] {txn.description} {format_money(txn.amount, currency)}")


def process_command(offline: bool = False) -> None:
    """Run the recurring catch-up pass."""
    db_path = require_database()

    try:
        today = resolve_today(offline)
        config = get_app_config(db_path)
        result = catch_up(db_path, today)

        if not result.transactions:
            notify(console, f"Nothing due up to {today.isoformat()}", "info")
        else:
            report_catch_up(result, config.currency)

        deactivated = [
            s for s, before in zip(result.schedules, config.recurring_schedules) if before.active and not s.active
        ]
        for schedule in deactivated:
            notify(console, f"Schedule finished: {schedule.description}", "info")

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def list_command(all: bool = False) -> None:
    """List recurring schedules."""
    db_path = require_database()

    try:
        config = get_app_config(db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    schedules = [s for s in config.recurring_schedules if all or s.active]
    if not schedules:
        console.print("[yellow]No recurring schedules found[/yellow]")
        return

    table = Table(title="Recurring schedules")
    table.add_column("ID", style="dim")
    table.add_column("Description", style="white")
    table.add_column("Amount", justify="right")
    table.add_column("Type")
    table.add_column("Every", style="cyan")
    table.add_column("Last run", style="cyan")
    table.add_column("Ends")
    table.add_column("Done", justify="right")
    table.add_column("Status", justify="center")

    for schedule in schedules:
        if schedule.end_condition == "date":
            ends = schedule.occ_until.isoformat() if schedule.occ_until else "[dim]never[/dim]"
        else:
            ends = f"after {schedule.occ_count}" if schedule.occ_count else "[dim]unset[/dim]"
        table.add_row(
            schedule.id,
            schedule.description,
            format_money(schedule.amount, config.currency),
            schedule.type,
            schedule.frequency,
            schedule_cursor(schedule).isoformat(),
            ends,
            str(schedule.processed_count),
            "✓" if schedule.active else "⊗",
        )

    console.print(table)


def stop_command(schedule_id: str) -> None:
    """Deactivate a recurring schedule."""
    db_path = require_database()

    try:
        config = get_app_config(db_path)
        schedules, error = stop_schedule(config.recurring_schedules, schedule_id)
        if error:
            notify(console, error, "error")
            sys.exit(1)

        save_app_config(replace(config, recurring_schedules=tuple(schedules)), db_path)
        notify(console, f"Schedule {schedule_id} stopped", "success")

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
