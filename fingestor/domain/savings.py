"""Pure functions for savings goals: allocation and withdrawal detection.

This module contains the functional core for goal operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

All monetary amounts are in cents (Money type).
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import date

from fingestor.domain.models import (
    AUTOMATIC_SAVINGS,
    INTER_ACCOUNT_TRANSFER,
    CategoryName,
    Description,
    Goal,
    Money,
    Transaction,
    TransactionType,
)
from fingestor.domain.recurrence import new_id


@dataclass(frozen=True)
class AllocationResult:
    """Immutable allocation outcome. On error, goals are unchanged and transaction is None."""

    amount: Money
    goals: list[Goal]
    transaction: Transaction | None
    error: str | None = None


@dataclass(frozen=True)
class WithdrawalResult:
    """Immutable outcome of applying savings policies to a new transaction."""

    goals: list[Goal]
    withdrawn: Money


def allocation_preview(current_balance: Money, allocation_percentage: int) -> Money:
    """Calculate the amount an allocation would move into a goal.

    Args:
        current_balance: Current main balance in cents (may be negative).
        allocation_percentage: Percentage of the balance to allocate.

    Returns:
        Amount in cents, rounded half-up. Zero when the balance is not positive.
    """
    available = max(0, current_balance)
    percentage = max(0, allocation_percentage)
    return Money((available * percentage + 50) // 100)


def validate_allocation_percentage(percentage: int) -> tuple[bool, str | None]:
    """Validate an allocation percentage setting.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if percentage < 1 or percentage > 100:
        return False, "Allocation percentage must be between 1 and 100"
    return True, None


def allocate(
    goal_id: str,
    current_balance: Money,
    allocation_percentage: int,
    goals: Iterable[Goal],
    today: date,
    make_id: Callable[[], str] = new_id,
) -> AllocationResult:
    """Move a percentage of the current balance into a goal.

    The goal's saved amount grows by the allocated amount and a matching
    transfer in the "Automatic Savings" category is produced, so the main
    balance drops by the same amount.

    Args:
        goal_id: Id of the goal receiving the money.
        current_balance: Current main balance in cents.
        allocation_percentage: Percentage of the balance to allocate.
        goals: All goals.
        today: Date for the transfer transaction.
        make_id: Factory for the new transaction id.

    Returns:
        AllocationResult. Nothing changes when the amount is not positive or
        the goal does not exist.
    """
    goals = list(goals)
    amount = allocation_preview(current_balance, allocation_percentage)

    if amount <= 0:
        return AllocationResult(amount=Money(0), goals=goals, transaction=None, error="Nothing to allocate")

    target = next((g for g in goals if g.id == goal_id), None)
    if target is None:
        return AllocationResult(amount=Money(0), goals=goals, transaction=None, error=f"Goal {goal_id} not found")

    updated = [
        replace(g, current_amount=Money(g.current_amount + amount)) if g.id == goal_id else g for g in goals
    ]
    transaction = Transaction(
        id=make_id(),
        date=today,
        description=Description(f"Savings: {target.title}"),
        amount=amount,
        type="transfer",
        category=AUTOMATIC_SAVINGS,
    )
    return AllocationResult(amount=amount, goals=updated, transaction=transaction)


def prorate_withdrawal(goals: Iterable[Goal], amount: Money) -> WithdrawalResult:
    """Reduce every goal in proportion to its share of total savings.

    Each goal loses floor(current_amount * taken / total_saved) cents, where
    taken is the amount capped at total_saved. The cents left over by flooring
    go one each to the goals with the largest fractional remainders (earlier
    goals first on ties), so the goals always lose exactly the amount taken and
    never drop below zero.

    Args:
        goals: All goals.
        amount: Amount pulled out of savings in cents.

    Returns:
        WithdrawalResult with updated goals. Goals are unchanged when nothing
        is saved.
    """
    goals = list(goals)
    held = [max(0, goal.current_amount) for goal in goals]
    total_saved = sum(held)
    if total_saved <= 0 or amount <= 0:
        return WithdrawalResult(goals=goals, withdrawn=Money(0))

    taken = min(amount, total_saved)
    shares: list[int] = []
    remainders: list[int] = []
    for saved in held:
        share, remainder = divmod(saved * taken, total_saved)
        shares.append(share)
        remainders.append(remainder)

    leftover = taken - sum(shares)
    by_remainder = sorted(range(len(goals)), key=lambda i: (-remainders[i], i))
    for i in by_remainder[:leftover]:
        shares[i] += 1

    updated = [
        replace(goal, current_amount=Money(goal.current_amount - share)) if share else goal
        for goal, share in zip(goals, shares)
    ]
    return WithdrawalResult(goals=updated, withdrawn=Money(taken))


# Category -> policy applied to goals when a transaction of a withdrawal type is added
WITHDRAWAL_POLICIES: dict[CategoryName, Callable[[Iterable[Goal], Money], WithdrawalResult]] = {
    AUTOMATIC_SAVINGS: prorate_withdrawal,
    INTER_ACCOUNT_TRANSFER: prorate_withdrawal,
}

WITHDRAWAL_TYPES: tuple[TransactionType, ...] = ("income", "transfer")


def is_saving_withdrawal(txn: Transaction) -> bool:
    """Check whether a transaction pulls money back out of savings."""
    return txn.type in WITHDRAWAL_TYPES and txn.category in WITHDRAWAL_POLICIES


def apply_savings_policies(txn: Transaction, goals: Iterable[Goal]) -> WithdrawalResult:
    """Apply the category policy for a newly added transaction, if any.

    Args:
        txn: Transaction being added.
        goals: All goals.

    Returns:
        WithdrawalResult; goals are unchanged when no policy applies.
    """
    goals = list(goals)
    if not is_saving_withdrawal(txn):
        return WithdrawalResult(goals=goals, withdrawn=Money(0))
    policy = WITHDRAWAL_POLICIES[txn.category]
    return policy(goals, txn.amount)


def validate_goal(title: str, target_amount: Money, current_amount: Money) -> tuple[bool, str | None]:
    """Validate a new goal.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not title.strip():
        return False, "Title is required"
    if target_amount <= 0:
        return False, "Target amount must be positive"
    if current_amount < 0:
        return False, "Current amount cannot be negative"
    return True, None


def goal_progress(goal: Goal) -> float:
    """Percentage of the target reached, capped at 100."""
    if goal.target_amount <= 0:
        return 0.0
    return min(goal.current_amount / goal.target_amount * 100, 100.0)
