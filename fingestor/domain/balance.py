"""Pure functions for balance derivation.

This module contains the functional core for balances:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

Transfers carry no sign of their own. Their direction is inferred from the
category and from an "outgoing" keyword in the description.

All monetary amounts are in cents (Money type).
"""

from collections.abc import Iterable
from dataclasses import dataclass

from fingestor.domain.models import (
    AUTOMATIC_SAVINGS,
    INTER_ACCOUNT_TRANSFER,
    Goal,
    Money,
    Transaction,
)

OUTGOING_KEYWORDS = ("saída", "outgoing")


@dataclass(frozen=True)
class BalanceSummary:
    """Immutable breakdown of the current balance."""

    income: Money
    expense: Money
    transfer_in: Money
    transfer_out: Money
    balance: Money


def is_outgoing_description(description: str) -> bool:
    """Check whether a description marks a transfer as leaving the account."""
    lowered = description.lower()
    return any(keyword in lowered for keyword in OUTGOING_KEYWORDS)


def is_transfer_out(txn: Transaction) -> bool:
    """Check whether a transaction is a transfer out of the main balance."""
    if txn.type != "transfer":
        return False
    return txn.category == AUTOMATIC_SAVINGS or is_outgoing_description(txn.description)


def is_transfer_in(txn: Transaction) -> bool:
    """Check whether a transaction is a transfer into the main balance."""
    if txn.type != "transfer":
        return False
    return txn.category == INTER_ACCOUNT_TRANSFER and not is_outgoing_description(txn.description)


def summarize(transactions: Iterable[Transaction]) -> BalanceSummary:
    """Classify transactions and combine them into a balance summary.

    Args:
        transactions: Transactions to aggregate, in any order.

    Returns:
        BalanceSummary where balance = income - expense + transfer_in - transfer_out.
    """
    income = expense = transfer_in = transfer_out = 0

    for txn in transactions:
        if txn.type == "income":
            income += txn.amount
        elif txn.type == "expense":
            expense += txn.amount
        elif is_transfer_out(txn):
            transfer_out += txn.amount
        elif is_transfer_in(txn):
            transfer_in += txn.amount

    return BalanceSummary(
        income=Money(income),
        expense=Money(expense),
        transfer_in=Money(transfer_in),
        transfer_out=Money(transfer_out),
        balance=Money(income - expense + transfer_in - transfer_out),
    )


def compute_balance(transactions: Iterable[Transaction]) -> Money:
    """Compute the current balance from all transactions.

    Args:
        transactions: Transactions to aggregate, in any order.

    Returns:
        Current balance in cents (can be negative).
    """
    return summarize(transactions).balance


def compute_savings_balance(goals: Iterable[Goal]) -> Money:
    """Sum the saved amount across all goals."""
    return Money(sum(goal.current_amount for goal in goals))
