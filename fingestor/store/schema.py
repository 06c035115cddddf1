"""Database schema initialization and migrations."""

import json
import os
import sqlite3
from pathlib import Path

# Bump when the JSON document layout changes and add a migration step below
SCHEMA_VERSION = 1

COLLECTION_KEYS = ("transactions", "investments", "goals")
CONFIG_KEY = "config"


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_db_path() -> Path:
    """Get the default database path (XDG compliant)."""
    return get_xdg_data_home() / "fingestor" / "fingestor.db"


def database_exists(db_path: Path | None = None) -> bool:
    """Check if the database file exists.

    Args:
        db_path: Path to check. If None, uses default location.

    Returns:
        True if database exists, False otherwise.
    """
    if db_path is None:
        db_path = get_db_path()
    return db_path.exists()


def get_schema_version(db_path: Path | None = None) -> int:
    """Read the schema version recorded in the database."""
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(db_path)
    try:
        return int(conn.execute("PRAGMA user_version").fetchone()[0])
    finally:
        conn.close()


def init_database(db_path: Path | None = None) -> None:
    """Initialize the key-value store with one JSON document per collection.

    Existing documents are left untouched, so this is safe to run on an
    existing database to bring its schema up to date.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """
        )

        for key in COLLECTION_KEYS:
            cursor.execute("INSERT OR IGNORE INTO kv (key, value) VALUES (?, ?)", (key, json.dumps([])))

        cursor.execute("INSERT OR IGNORE INTO kv (key, value) VALUES (?, ?)", (CONFIG_KEY, json.dumps({})))

        cursor.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

        conn.commit()

    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()


def missing_documents(db_path: Path | None = None) -> list[str]:
    """List the store documents the database does not hold yet.

    Returns:
        Document keys in store order; every key when the kv table is absent.
    """
    if db_path is None:
        db_path = get_db_path()
    keys = (*COLLECTION_KEYS, CONFIG_KEY)
    conn = sqlite3.connect(db_path)
    try:
        if conn.execute("SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'kv'").fetchone() is None:
            return list(keys)
        present = {row[0] for row in conn.execute("SELECT key FROM kv")}
    finally:
        conn.close()
    return [key for key in keys if key not in present]
