"""Database query functions.

Every collection is one JSON document in the kv table. Functions that touch
several documents write them inside a single transaction.
"""

import json
import sqlite3
from collections.abc import Iterable
from dataclasses import replace
from pathlib import Path
from typing import Any

from fingestor.domain.models import AppConfig, Goal, Investment, RecurringSchedule, Transaction
from fingestor.domain.transactions import merge_imported, remove_by_id
from fingestor.store.codec import (
    config_from_dict,
    config_to_dict,
    goal_from_dict,
    goal_to_dict,
    investment_from_dict,
    investment_to_dict,
    transaction_from_dict,
    transaction_to_dict,
)
from fingestor.store.schema import CONFIG_KEY, get_db_path


def _connect(db_path: Path | None = None) -> sqlite3.Connection:
    """Create a database connection.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Database connection.
    """
    if db_path is None:
        db_path = get_db_path()
    return sqlite3.connect(db_path)


def _read(cursor: sqlite3.Cursor, key: str, default: Any) -> Any:
    cursor.execute("SELECT value FROM kv WHERE key = ?", (key,))
    row = cursor.fetchone()
    if row is None:
        return default
    return json.loads(row[0])


def _write(cursor: sqlite3.Cursor, key: str, value: Any) -> None:
    cursor.execute(
        "INSERT INTO kv (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value = excluded.value",
        (key, json.dumps(value, ensure_ascii=False)),
    )


def _write_documents(documents: dict[str, Any], db_path: Path | None = None) -> None:
    """Write several documents in one transaction.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            for key, value in documents.items():
                _write(cursor, key, value)
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


def _transactions_doc(transactions: Iterable[Transaction]) -> list[dict[str, Any]]:
    return [transaction_to_dict(t) for t in transactions]


def _goals_doc(goals: Iterable[Goal]) -> list[dict[str, Any]]:
    return [goal_to_dict(g) for g in goals]


def _investments_doc(investments: Iterable[Investment]) -> list[dict[str, Any]]:
    return [investment_to_dict(i) for i in investments]


# Transactions


def get_transactions(db_path: Path | None = None) -> list[Transaction]:
    """Get all transactions in insertion order.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        return [transaction_from_dict(d) for d in _read(conn.cursor(), "transactions", [])]


def add_transaction(txn: Transaction, goals: list[Goal] | None = None, db_path: Path | None = None) -> None:
    """Append a transaction, optionally replacing goals in the same transaction.

    Args:
        txn: Transaction to append.
        goals: Updated goals to store alongside (e.g. after a savings withdrawal).
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    transactions = get_transactions(db_path)
    transactions.append(txn)
    documents: dict[str, Any] = {"transactions": _transactions_doc(transactions)}
    if goals is not None:
        documents["goals"] = _goals_doc(goals)
    _write_documents(documents, db_path)


def delete_transaction(txn_id: str, db_path: Path | None = None) -> bool:
    """Delete a transaction by id.

    Returns:
        True if a transaction was removed.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    remaining, removed = remove_by_id(get_transactions(db_path), txn_id)
    if removed:
        _write_documents({"transactions": _transactions_doc(remaining)}, db_path)
    return removed


def import_transactions(imported: list[Transaction], db_path: Path | None = None) -> tuple[int, int]:
    """Append imported transactions, skipping ids already stored.

    Returns:
        Tuple of (inserted, skipped).

    Raises:
        sqlite3.Error: If database operation fails.
    """
    if not imported:
        return 0, 0
    merged, skipped = merge_imported(get_transactions(db_path), imported)
    inserted = len(imported) - len(skipped)
    if inserted:
        _write_documents({"transactions": _transactions_doc(merged)}, db_path)
    return inserted, len(skipped)


# Goals


def get_goals(db_path: Path | None = None) -> list[Goal]:
    """Get all goals.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        return [goal_from_dict(d) for d in _read(conn.cursor(), "goals", [])]


def add_goal(goal: Goal, db_path: Path | None = None) -> None:
    """Append a goal.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    goals = get_goals(db_path)
    goals.append(goal)
    _write_documents({"goals": _goals_doc(goals)}, db_path)


def delete_goal(goal_id: str, db_path: Path | None = None) -> bool:
    """Delete a goal by id.

    Returns:
        True if a goal was removed.
    """
    goals = get_goals(db_path)
    remaining = [g for g in goals if g.id != goal_id]
    if len(remaining) == len(goals):
        return False
    _write_documents({"goals": _goals_doc(remaining)}, db_path)
    return True


def apply_allocation(goals: list[Goal], txn: Transaction, db_path: Path | None = None) -> None:
    """Store updated goals and the allocation transfer together.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    transactions = get_transactions(db_path)
    transactions.append(txn)
    _write_documents(
        {"transactions": _transactions_doc(transactions), "goals": _goals_doc(goals)},
        db_path,
    )


# Investments


def get_investments(db_path: Path | None = None) -> list[Investment]:
    """Get all investments.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        return [investment_from_dict(d) for d in _read(conn.cursor(), "investments", [])]


def add_investment(inv: Investment, db_path: Path | None = None) -> None:
    """Append an investment.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    investments = get_investments(db_path)
    investments.append(inv)
    _write_documents({"investments": _investments_doc(investments)}, db_path)


def delete_investment(inv_id: str, db_path: Path | None = None) -> bool:
    """Delete an investment by id.

    Returns:
        True if an investment was removed.
    """
    investments = get_investments(db_path)
    remaining = [i for i in investments if i.id != inv_id]
    if len(remaining) == len(investments):
        return False
    _write_documents({"investments": _investments_doc(remaining)}, db_path)
    return True


def import_investments(imported: list[Investment], db_path: Path | None = None) -> tuple[int, int]:
    """Append imported investments, skipping ids already stored.

    Returns:
        Tuple of (inserted, skipped).
    """
    if not imported:
        return 0, 0
    investments = get_investments(db_path)
    seen = {i.id for i in investments}
    skipped = 0
    for inv in imported:
        if inv.id in seen:
            skipped += 1
            continue
        seen.add(inv.id)
        investments.append(inv)
    inserted = len(imported) - skipped
    if inserted:
        _write_documents({"investments": _investments_doc(investments)}, db_path)
    return inserted, skipped


# Config


def get_app_config(db_path: Path | None = None) -> AppConfig:
    """Load user settings, alerts and recurring schedules.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        return config_from_dict(_read(conn.cursor(), CONFIG_KEY, {}))


def save_app_config(config: AppConfig, db_path: Path | None = None) -> None:
    """Persist user settings, alerts and recurring schedules.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    _write_documents({CONFIG_KEY: config_to_dict(config)}, db_path)


def apply_recurring_batch(
    new_transactions: list[Transaction],
    schedules: list[RecurringSchedule],
    db_path: Path | None = None,
) -> None:
    """Store generated transactions and advanced schedule cursors atomically.

    Args:
        new_transactions: Transactions emitted by the recurrence pass.
        schedules: Every schedule, with updated cursors.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            transactions = [transaction_from_dict(d) for d in _read(cursor, "transactions", [])]
            config = config_from_dict(_read(cursor, CONFIG_KEY, {}))
            transactions.extend(new_transactions)
            config = replace(config, recurring_schedules=tuple(schedules))
            _write(cursor, "transactions", _transactions_doc(transactions))
            _write(cursor, CONFIG_KEY, config_to_dict(config))
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
