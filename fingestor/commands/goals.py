"""Savings goal commands (add, delete, list, allocate)."""

import sqlite3
import sys

from rich.console import Console
from rich.table import Table

from fingestor.commands.admin import require_database
from fingestor.commands.recurring import catch_up, report_catch_up, resolve_today
from fingestor.domain.balance import compute_balance, compute_savings_balance
from fingestor.domain.models import Goal, format_money, to_money
from fingestor.domain.recurrence import new_id
from fingestor.domain.savings import allocate, allocation_preview, goal_progress, validate_goal
from fingestor.notifications import notify
from fingestor.store.queries import (
    add_goal,
    apply_allocation,
    delete_goal,
    get_app_config,
    get_goals,
    get_transactions,
)

console = Console()


def add_command(title: str, target: str, current: str = "0") -> None:
    """Create a savings goal."""
    db_path = require_database()

    try:
        target_amount = to_money(target)
        current_amount = to_money(current)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    valid, error = validate_goal(title, target_amount, current_amount)
    if not valid:
        console.print(f"[red]{error}[/red]")
        sys.exit(1)

    goal = Goal(id=new_id(), title=title.strip(), target_amount=target_amount, current_amount=current_amount)

    try:
        add_goal(goal, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    notify(console, f"Goal created: {goal.title} (ID: {goal.id})", "success")


def delete_command(goal_id: str) -> None:
    """Delete a savings goal."""
    db_path = require_database()

    try:
        if not delete_goal(goal_id, db_path):
            notify(console, f"Goal {goal_id} not found", "error")
            sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    notify(console, "Goal removed", "info")


def list_command(offline: bool = False) -> None:
    """List goals with progress and the amount the next allocation would move.

    Due recurring transactions are generated first so the preview uses the
    same balance an allocation would.
    """
    db_path = require_database()

    try:
        config = get_app_config(db_path)
        report_catch_up(catch_up(db_path, resolve_today(offline)), config.currency)
        goals = get_goals(db_path)
        balance = compute_balance(get_transactions(db_path))
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if not goals:
        console.print("[yellow]No goals yet. Create one with 'fingestor goal add'.[/yellow]")
        return

    table = Table(title="Savings goals")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="white")
    table.add_column("Saved", justify="right", style="green")
    table.add_column("Target", justify="right")
    table.add_column("Progress", justify="right", style="cyan")

    for goal in goals:
        table.add_row(
            goal.id,
            goal.title,
            format_money(goal.current_amount, config.currency),
            format_money(goal.target_amount, config.currency),
            f"{goal_progress(goal):.0f}%",
        )

    console.print(table)
    console.print(f"\nTotal saved: [green]{format_money(compute_savings_balance(goals), config.currency)}[/green]")
    preview = allocation_preview(balance, config.allocation_percentage)
    console.print(
        f"[dim]Next allocation ({config.allocation_percentage}% of balance): "
        f"{format_money(preview, config.currency)}[/dim]"
    )


def allocate_command(goal_id: str, offline: bool = False) -> None:
    """Move the configured percentage of the current balance into a goal."""
    db_path = require_database()

    try:
        today = resolve_today(offline)
        config = get_app_config(db_path)
        report_catch_up(catch_up(db_path, today), config.currency)

        balance = compute_balance(get_transactions(db_path))
        result = allocate(goal_id, balance, config.allocation_percentage, get_goals(db_path), today)

        if result.error or result.transaction is None:
            notify(console, result.error or "Nothing to allocate", "error")
            sys.exit(1)

        apply_allocation(result.goals, result.transaction, db_path)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    notify(console, f"-> {format_money(result.amount, config.currency)} moved to savings", "success")
    console.print(f"[dim]{result.transaction.description}[/dim]")
