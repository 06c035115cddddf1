"""Domain types and records for fingestor.

These NewTypes provide semantic clarity and help with type checking:
- Money: Amount in cents (minor units)
- Month: Month in YYYY-MM format
- CategoryName: Free-text transaction category
- Description: Transaction description text

Records are immutable dataclasses. Operations that "change" a record return a
new instance (see dataclasses.replace).
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Literal, NewType

# Money amounts are stored as cents (minor units) to avoid floating point errors
Money = NewType("Money", int)

# Month is always in YYYY-MM format (e.g., "2025-01")
Month = NewType("Month", str)

CategoryName = NewType("CategoryName", str)

Description = NewType("Description", str)

TransactionType = Literal["income", "expense", "transfer"]
Frequency = Literal["daily", "weekly", "monthly", "yearly"]
EndCondition = Literal["count", "date"]
InvestmentAction = Literal["Market buy", "Market sell", "Dividend", "Deposit", "Withdrawal", "Interest on cash"]
Language = Literal["pt", "en"]
ThemeMode = Literal["light", "dark", "auto"]
ChartType = Literal["pie", "bar"]

TRANSACTION_TYPES: tuple[TransactionType, ...] = ("income", "expense", "transfer")
FREQUENCIES: tuple[Frequency, ...] = ("daily", "weekly", "monthly", "yearly")
END_CONDITIONS: tuple[EndCondition, ...] = ("count", "date")
INVESTMENT_ACTIONS: tuple[InvestmentAction, ...] = (
    "Market buy",
    "Market sell",
    "Dividend",
    "Deposit",
    "Withdrawal",
    "Interest on cash",
)

# Category values that carry meaning for balance direction and savings
AUTOMATIC_SAVINGS = CategoryName("Automatic Savings")
INTER_ACCOUNT_TRANSFER = CategoryName("Inter-account Transfer")
OTHER = CategoryName("Other")

DEFAULT_CATEGORIES: list[CategoryName] = [
    CategoryName("Food"),
    CategoryName("Housing"),
    CategoryName("Transport"),
    CategoryName("Health"),
    CategoryName("Leisure"),
    CategoryName("Salary"),
    CategoryName("Investment"),
    AUTOMATIC_SAVINGS,
    INTER_ACCOUNT_TRANSFER,
    OTHER,
]

_CENT = Decimal("0.01")


def to_money(value: str | int | float | Decimal) -> Money:
    """Convert an amount in major units (e.g. euros) to Money in cents.

    Rounds half-up to the nearest cent. Accepts a comma as decimal separator.

    Args:
        value: Amount in major units.

    Returns:
        Amount in cents.

    Raises:
        ValueError: If the value cannot be parsed as a number or is too large.
    """
    text = str(value).strip().replace(",", ".")
    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount '{value}'") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid amount '{value}'")
    try:
        cents = amount.quantize(_CENT, rounding=ROUND_HALF_UP) * 100
    except InvalidOperation as e:
        raise ValueError(f"Amount out of range '{value}'") from e
    return Money(int(cents.to_integral_value()))


def to_major(amount: Money) -> float:
    """Convert Money in cents to a float in major units for serialization."""
    return float(Decimal(amount) / 100)


def format_money(amount: Money, currency: str = "€") -> str:
    """Format Money for display, e.g. 1234.50€."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{abs(amount) / 100:,.2f}{currency}"


@dataclass(frozen=True)
class Transaction:
    """Immutable transaction record. Amount is always a non-negative magnitude."""

    id: str
    date: date
    description: Description
    amount: Money
    type: TransactionType
    category: CategoryName


@dataclass(frozen=True)
class Goal:
    """Immutable savings goal."""

    id: str
    title: str
    target_amount: Money
    current_amount: Money = Money(0)


@dataclass(frozen=True)
class Investment:
    """Immutable investment trade or cash movement."""

    id: str
    name: str
    type: InvestmentAction
    date: date
    price_per_share: float
    invested_value: Money
    shares: float
    ticker: str | None = None
    isin: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class RecurringSchedule:
    """Immutable recurring schedule; the recurrence engine returns updated copies."""

    id: str
    description: Description
    amount: Money
    type: TransactionType
    category: CategoryName
    frequency: Frequency
    start_date: date
    last_processed_date: date | None = None
    active: bool = True
    end_condition: EndCondition = "count"
    occ_count: int | None = None
    occ_until: date | None = None
    processed_count: int = 0


@dataclass(frozen=True)
class Alert:
    """Monthly spending limit for a category."""

    id: str
    category: CategoryName
    limit: Money


@dataclass(frozen=True)
class AppConfig:
    """User settings plus the alert and recurring schedule collections."""

    allocation_percentage: int = 10
    currency: str = "€"
    language: Language = "pt"
    user_name: str = "Investidor"
    theme: ThemeMode = "auto"
    show_dashboard_charts: bool = True
    dashboard_chart_type: ChartType = "pie"
    show_investment_charts: bool = True
    investment_chart_type: ChartType = "pie"
    alerts: tuple[Alert, ...] = field(default_factory=tuple)
    recurring_schedules: tuple[RecurringSchedule, ...] = field(default_factory=tuple)
