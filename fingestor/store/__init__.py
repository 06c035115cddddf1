"""Database store layer - provides persistence for the application.

This module re-exports all public database functions for easy importing.
"""

from fingestor.store.queries import (
    add_goal,
    add_investment,
    add_transaction,
    apply_allocation,
    apply_recurring_batch,
    delete_goal,
    delete_investment,
    delete_transaction,
    get_app_config,
    get_goals,
    get_investments,
    get_transactions,
    import_investments,
    import_transactions,
    save_app_config,
)
from fingestor.store.schema import database_exists, get_db_path, get_schema_version, init_database

__all__ = [
    # Schema
    "database_exists",
    "get_db_path",
    "get_schema_version",
    "init_database",
    # Queries
    "add_goal",
    "add_investment",
    "add_transaction",
    "apply_allocation",
    "apply_recurring_batch",
    "delete_goal",
    "delete_investment",
    "delete_transaction",
    "get_app_config",
    "get_goals",
    "get_investments",
    "get_transactions",
    "import_investments",
    "import_transactions",
    "save_app_config",
]
