"""Date utilities for fingestor.

Pure functions for date range calculations and schedule period arithmetic.
"""

from datetime import date, datetime, timedelta

from fingestor.domain.models import Frequency, Month


def month_range(month: Month) -> tuple[str, str, str]:
    """Calculate date range and label for a month.

    Args:
        month: Month in YYYY-MM format.

    Returns:
        Tuple of (since_date, until_date, label) where:
        - since_date: First day of month (YYYY-MM-DD)
        - until_date: First day of next month (YYYY-MM-DD)
        - label: Human-readable month (e.g., "January 2025")
    """
    dt = datetime.strptime(month, "%Y-%m")
    since = dt.strftime("%Y-%m-01")
    next_month = (dt.replace(day=28) + timedelta(days=4)).replace(day=1)
    until = next_month.strftime("%Y-%m-%d")
    label = dt.strftime("%B %Y")
    return since, until, label


def add_months(start: date, months: int) -> date:
    """Add calendar months, letting an out-of-range day overflow into the next month.

    Jan 31 + 1 month is Mar 3 in a non-leap year (Feb has no 31st, so the three
    extra days carry over), and Feb 29 + 12 months is Mar 1.

    Args:
        start: Starting date.
        months: Number of months to add (may be negative).

    Returns:
        Resulting date.
    """
    index = start.year * 12 + (start.month - 1) + months
    year, month = divmod(index, 12)
    return date(year, month + 1, 1) + timedelta(days=start.day - 1)


def advance(cursor: date, frequency: Frequency) -> date:
    """Advance a schedule cursor by one period.

    Args:
        cursor: Current cursor date.
        frequency: One of daily, weekly, monthly, yearly.

    Returns:
        The next occurrence date.

    Raises:
        ValueError: If frequency is unknown.
    """
    if frequency == "daily":
        return cursor + timedelta(days=1)
    if frequency == "weekly":
        return cursor + timedelta(days=7)
    if frequency == "monthly":
        return add_months(cursor, 1)
    if frequency == "yearly":
        return add_months(cursor, 12)
    raise ValueError(f"Unknown frequency '{frequency}'")


def parse_date(raw: str) -> date:
    """Parse an ISO date (YYYY-MM-DD), ignoring any time component.

    Raises:
        ValueError: If the string is not an ISO date.
    """
    return date.fromisoformat(raw.strip()[:10])


def current_month(today: date) -> Month:
    """Return the YYYY-MM month containing today."""
    return Month(today.strftime("%Y-%m"))
