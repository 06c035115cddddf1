"""Pure functions for investment records and portfolio summaries.

All monetary amounts are in cents (Money type).
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any, cast

from fingestor.dates import parse_date
from fingestor.domain.models import INVESTMENT_ACTIONS, Investment, InvestmentAction, Money, to_major, to_money
from fingestor.domain.recurrence import new_id
from fingestor.domain.transactions import first_value

EXPORT_HEADERS = [
    "Id",
    "Name",
    "Ticker",
    "Isin",
    "Type",
    "Date",
    "PricePerShare",
    "InvestedValue",
    "Shares",
    "Notes",
]


@dataclass(frozen=True)
class PortfolioSummary:
    """Immutable portfolio totals."""

    buys: Money
    sells: Money
    dividends: Money
    deposits: Money
    withdrawals: Money
    cash_balance: Money
    net_invested: Money
    allocation: dict[str, Money]


def shares_for(invested_value: Money, price_per_share: float) -> float:
    """Number of shares bought for an amount at a price, rounded to 6 places."""
    if price_per_share <= 0:
        return 0.0
    return round(invested_value / 100 / price_per_share, 6)


def validate_investment(name: str, type: str, invested_value: Money) -> tuple[bool, str | None]:
    """Validate a new investment record.

    Dividends may be recorded without a value; every other action needs one.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not name.strip():
        return False, "Name is required"
    if type not in INVESTMENT_ACTIONS:
        return False, f"Type must be one of: {', '.join(INVESTMENT_ACTIONS)}"
    if invested_value < 0:
        return False, "Invested value cannot be negative"
    if invested_value == 0 and type != "Dividend":
        return False, "Invested value is required"
    return True, None


def summarize_portfolio(investments: Iterable[Investment]) -> PortfolioSummary:
    """Aggregate trades and cash movements.

    cash_balance = deposits - withdrawals - buys + sells + dividends
    net_invested = buys - sells

    Allocation groups buys by ticker, or by name when there is no ticker.
    """
    buys = sells = dividends = deposits = withdrawals = 0
    allocation: dict[str, int] = {}

    for inv in investments:
        if inv.type == "Market buy":
            buys += inv.invested_value
            key = inv.ticker or inv.name
            allocation[key] = allocation.get(key, 0) + inv.invested_value
        elif inv.type == "Market sell":
            sells += inv.invested_value
        elif inv.type.startswith("Dividend"):
            dividends += inv.invested_value
        elif inv.type == "Deposit":
            deposits += inv.invested_value
        elif inv.type == "Withdrawal":
            withdrawals += inv.invested_value

    return PortfolioSummary(
        buys=Money(buys),
        sells=Money(sells),
        dividends=Money(dividends),
        deposits=Money(deposits),
        withdrawals=Money(withdrawals),
        cash_balance=Money(deposits - withdrawals - buys + sells + dividends),
        net_invested=Money(buys - sells),
        allocation={key: Money(amount) for key, amount in allocation.items()},
    )


def search_investments(investments: Iterable[Investment], term: str) -> list[Investment]:
    """Filter by case-insensitive match on name, ticker or ISIN, newest entry first."""
    needle = term.lower()
    matches = [
        inv
        for inv in investments
        if needle in inv.name.lower()
        or (inv.ticker and needle in inv.ticker.lower())
        or (inv.isin and needle in inv.isin.lower())
    ]
    return list(reversed(matches))


def _to_float(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        return float(str(value).strip().replace(",", "."))
    except ValueError:
        return 0.0


def parse_investment_row(
    row: dict[str, Any],
    today: date,
    normalize_date: Callable[[str], date] = parse_date,
    make_id: Callable[[], str] = new_id,
) -> Investment | None:
    """Parse an imported row (app export or broker history) into an investment.

    Args:
        row: Row as a dictionary of column name to raw value.
        today: Date used when the row has no date.
        normalize_date: Parser for raw date strings.
        make_id: Factory used when the row has no id.

    Returns:
        Investment if valid, None if the row should be skipped.
    """
    action = str(first_value(row, ("type", "Type", "Action", "action")) or "Market buy").strip()
    if action not in INVESTMENT_ACTIONS and not action.startswith("Dividend"):
        return None
    if action.startswith("Dividend"):
        action = "Dividend"

    raw_date = first_value(row, ("date", "Date", "Time", "time"))
    if raw_date is None:
        inv_date = today
    else:
        try:
            inv_date = normalize_date(str(raw_date).split(" ")[0])
        except ValueError:
            return None

    try:
        invested = Money(abs(to_money(first_value(row, ("investedValue", "InvestedValue", "Total", "total")) or 0)))
    except ValueError:
        return None

    raw_id = first_value(row, ("id", "Id", "ID"))
    ticker = first_value(row, ("ticker", "Ticker"))
    isin = first_value(row, ("isin", "ISIN", "Isin"))
    notes = first_value(row, ("notes", "Notes"))

    return Investment(
        id=str(raw_id).strip() if raw_id is not None else make_id(),
        name=str(first_value(row, ("name", "Name")) or "Unknown asset").strip(),
        type=cast(InvestmentAction, action),
        date=inv_date,
        price_per_share=_to_float(first_value(row, ("pricePerShare", "PricePerShare", "Price / share", "price"))),
        invested_value=invested,
        shares=_to_float(first_value(row, ("shares", "Shares", "No. of shares"))),
        ticker=str(ticker).strip().upper() if ticker is not None else None,
        isin=str(isin).strip().upper() if isin is not None else None,
        notes=str(notes) if notes is not None else None,
    )


def to_export_row(inv: Investment) -> dict[str, Any]:
    """Map an investment to an export row keyed by EXPORT_HEADERS."""
    return {
        "Id": inv.id,
        "Name": inv.name,
        "Ticker": inv.ticker or "",
        "Isin": inv.isin or "",
        "Type": inv.type,
        "Date": inv.date.isoformat(),
        "PricePerShare": inv.price_per_share,
        "InvestedValue": to_major(inv.invested_value),
        "Shares": inv.shares,
        "Notes": inv.notes or "",
    }
