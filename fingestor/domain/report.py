"""Pure functions for report calculations and aggregations.

This module contains the functional core for reporting operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

All monetary amounts are in cents (Money type).
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from fingestor.dates import month_range
from fingestor.domain.models import (
    AUTOMATIC_SAVINGS,
    Alert,
    CategoryName,
    Money,
    Month,
    Transaction,
)


@dataclass(frozen=True)
class CategoryReport:
    """Immutable category report data."""

    category: CategoryName
    amount: Money
    percentage: float


@dataclass(frozen=True)
class AlertStatus:
    """Immutable spending status for one alert."""

    alert: Alert
    spent: Money
    exceeded: bool

    @property
    def remaining(self) -> Money:
        return Money(self.alert.limit - self.spent)


def counts_as_spending(txn: Transaction) -> bool:
    """Expenses and money moved into automatic savings count as spending."""
    return txn.type == "expense" or (txn.type == "transfer" and txn.category == AUTOMATIC_SAVINGS)


def filter_by_month(transactions: Iterable[Transaction], month: Month) -> list[Transaction]:
    """Keep transactions dated inside a month.

    Args:
        transactions: Transactions to filter.
        month: Month in YYYY-MM format.

    Returns:
        Transactions in the month, in their original order.

    Raises:
        ValueError: If month is not in YYYY-MM format.
    """
    since, until, _ = month_range(month)
    since_date = date.fromisoformat(since)
    until_date = date.fromisoformat(until)
    return [t for t in transactions if since_date <= t.date < until_date]


def expenses_by_category(transactions: Iterable[Transaction]) -> dict[CategoryName, Money]:
    """Sum spending per category.

    Returns:
        Dictionary mapping category to total spent in cents.
    """
    totals: dict[CategoryName, int] = {}
    for txn in transactions:
        if counts_as_spending(txn):
            totals[txn.category] = totals.get(txn.category, 0) + txn.amount
    return {category: Money(amount) for category, amount in totals.items()}


def create_category_reports(totals: dict[CategoryName, Money], sort_by: str = "value") -> list[CategoryReport]:
    """Turn category totals into sorted reports with share of the total.

    Args:
        totals: Dictionary mapping category to amount in cents.
        sort_by: "value" (largest first) or "alpha".

    Returns:
        List of CategoryReport.
    """
    grand_total = sum(totals.values())
    reports = [
        CategoryReport(
            category=category,
            amount=amount,
            percentage=(amount / grand_total * 100) if grand_total > 0 else 0.0,
        )
        for category, amount in totals.items()
    ]
    if sort_by == "alpha":
        return sorted(reports, key=lambda r: r.category.lower())
    return sorted(reports, key=lambda r: r.amount, reverse=True)


def evaluate_alerts(
    transactions: Iterable[Transaction], alerts: Iterable[Alert], month: Month
) -> list[AlertStatus]:
    """Compare each alert's monthly limit against spending in its category.

    Args:
        transactions: All transactions.
        alerts: Configured alerts.
        month: Month to evaluate in YYYY-MM format.

    Returns:
        List of AlertStatus in alert order.
    """
    spending = expenses_by_category(filter_by_month(transactions, month))
    statuses: list[AlertStatus] = []
    for alert in alerts:
        spent = spending.get(alert.category, Money(0))
        statuses.append(AlertStatus(alert=alert, spent=spent, exceeded=spent > alert.limit))
    return statuses


def calculate_histogram_bar_length(amount: Money, max_amount: Money, max_width: int = 30) -> int:
    """Calculate histogram bar length proportional to the largest amount."""
    if max_amount <= 0:
        return 0
    return int(abs(amount) / abs(max_amount) * max_width)
