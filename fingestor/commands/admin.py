"""Admin commands for creating, upgrading and backing up the store."""

import shutil
import sqlite3
import sys
from datetime import datetime
from pathlib import Path

from rich.console import Console

from fingestor.config import create_default_config, get_config_path
from fingestor.notifications import notify
from fingestor.store.schema import (
    COLLECTION_KEYS,
    CONFIG_KEY,
    SCHEMA_VERSION,
    database_exists,
    get_db_path,
    get_schema_version,
    init_database,
    missing_documents,
)

console = Console()


def require_database() -> Path:
    """Return the database path, exiting with a hint if it is missing."""
    db_path = get_db_path()
    if not database_exists(db_path):
        console.print("[red]Database not found. Run 'fingestor init' first.[/red]", style="bold")
        sys.exit(1)
    return db_path


def backup_command(
    output_dir: str | None = None,
) -> None:
    """Backup database and configuration files."""
    db_path = require_database()
    config_path = get_config_path()

    if output_dir:
        backup_dir = Path(output_dir).expanduser()
    else:
        backup_dir = Path.home() / ".fingestor" / "backups"

    backup_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    db_backup = backup_dir / f"fingestor_{timestamp}.db"
    config_backup = backup_dir / f"config_{timestamp}.toml"

    try:
        shutil.copy2(db_path, db_backup)
        console.print(f"[green]✓[/green] Database backed up to: {db_backup}")

        if config_path.exists():
            shutil.copy2(config_path, config_backup)
            console.print(f"[green]✓[/green] Config backed up to: {config_backup}")
        else:
            console.print("[dim]No config file to back up[/dim]")

        console.print("\n[green]Backup complete![/green]", style="bold")
        console.print(f"[dim]Backup directory: {backup_dir}[/dim]")

    except OSError as e:
        console.print(f"[red]Backup failed: {e}[/red]", style="bold")
        sys.exit(1)


def upgrade_store(db_path: Path) -> None:
    """Bring an existing store up to the current layout, keeping its data.

    Adds an empty document for any collection the store lacks and records the
    current schema version. Documents that already exist are not rewritten.
    """
    previous = get_schema_version(db_path)
    missing = missing_documents(db_path)

    init_database(db_path)

    if missing:
        notify(console, f"Added empty documents: {', '.join(missing)}", "success")
    else:
        console.print("[dim]All store documents already present[/dim]")
    if previous != SCHEMA_VERSION:
        notify(console, f"Schema version {previous} -> {SCHEMA_VERSION}", "success")
    console.print(f"[green]Store is current[/green] [dim]({db_path}, schema v{SCHEMA_VERSION})[/dim]")


def create_store(db_path: Path, config_path: Path) -> None:
    """Create an empty store and write the default time source settings.

    An existing store file is deleted first.
    """
    if db_path.exists():
        notify(console, f"Discarding existing store at {db_path}", "info")
        db_path.unlink()

    init_database(db_path)
    notify(console, f"Empty store created: {', '.join((*COLLECTION_KEYS, CONFIG_KEY))}", "success")

    create_default_config(config_path)
    notify(console, f"Time source settings written to {config_path} (mode 600)", "success")

    console.print("\n[green]Ready.[/green] Add a transaction with 'fingestor add' or a goal with 'fingestor goal add'.")


def init_command(force: bool = False, migrate: bool = False) -> None:
    """Create the fingestor store and settings file, or upgrade an existing store."""
    db_path = get_db_path()
    config_path = get_config_path()

    try:
        if migrate:
            if not db_path.exists():
                console.print(f"[red]No store to upgrade at {db_path}[/red]", style="bold")
                console.print("[dim]Run 'fingestor init' to create one[/dim]")
                sys.exit(1)
            upgrade_store(db_path)
            return

        if not force and (db_path.exists() or config_path.exists()):
            if db_path.exists():
                console.print(f"[red]Store already exists:[/red] {db_path}")
            if config_path.exists():
                console.print(f"[red]Settings file already exists:[/red] {config_path}")
            console.print("[yellow]'fingestor init --migrate' keeps your data and adds anything missing[/yellow]")
            console.print("[yellow]'fingestor init --force' starts over with an empty store[/yellow]")
            sys.exit(1)

        create_store(db_path, config_path)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)
