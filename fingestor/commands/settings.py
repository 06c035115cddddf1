"""Settings and alert commands."""

import sqlite3
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from fingestor.commands.admin import require_database
from fingestor.config import get_config_path, get_time_source
from fingestor.domain.models import DEFAULT_CATEGORIES, AppConfig, format_money, to_money
from fingestor.domain.settings import add_alert, remove_alert, setting_values, update_setting
from fingestor.notifications import notify
from fingestor.store.queries import get_app_config, save_app_config

console = Console()


def _load() -> tuple[AppConfig, Path]:
    db_path = require_database()
    try:
        return get_app_config(db_path), db_path
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def _save(config: AppConfig, db_path: Path) -> None:
    try:
        save_app_config(config, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def show_command() -> None:
    """Show current settings and the time source configuration."""
    config, _ = _load()

    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    for name, value in setting_values(config).items():
        table.add_row(name, str(value))
    console.print(table)
    console.print(f"\n[dim]Categories: {', '.join(DEFAULT_CATEGORIES)}[/dim]")

    time_source = get_time_source()
    status = time_source["url"] if time_source.get("enabled", True) else "disabled (local clock)"
    console.print(f"\n[dim]Time source: {status}[/dim]")
    console.print(f"[dim]Config file: {get_config_path()}[/dim]")


def set_command(name: str, value: str) -> None:
    """Change a setting."""
    config, db_path = _load()

    config, error = update_setting(config, name, value)
    if error:
        notify(console, error, "error")
        sys.exit(1)

    _save(config, db_path)
    notify(console, f"{name} set to {value}", "success")


def alert_add_command(category: str, limit: str) -> None:
    """Add a monthly spending alert for a category."""
    config, db_path = _load()

    try:
        limit_amount = to_money(limit)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    config, error = add_alert(config, category, limit_amount)
    if error:
        notify(console, error, "error")
        sys.exit(1)

    _save(config, db_path)
    notify(console, f"Alert added: {category} over {format_money(limit_amount, config.currency)} per month", "success")


def alert_delete_command(alert_id: str) -> None:
    """Remove a spending alert."""
    config, db_path = _load()

    config, error = remove_alert(config, alert_id)
    if error:
        notify(console, error, "error")
        sys.exit(1)

    _save(config, db_path)
    notify(console, "Alert removed", "info")


def alert_list_command() -> None:
    """List spending alerts."""
    config, _ = _load()

    if not config.alerts:
        console.print("[yellow]No alerts configured[/yellow]")
        return

    table = Table(title="Spending alerts")
    table.add_column("ID", style="dim")
    table.add_column("Category", style="magenta")
    table.add_column("Monthly limit", justify="right")
    for alert in config.alerts:
        table.add_row(alert.id, alert.category, format_money(alert.limit, config.currency))
    console.print(table)
