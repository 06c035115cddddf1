"""Pure functions for transaction creation and import row parsing.

This module contains the functional core for transaction operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

All monetary amounts are in cents (Money type).
"""

from collections.abc import Callable, Iterable
from datetime import date
from typing import Any, cast

from fingestor.dates import parse_date
from fingestor.domain.models import (
    OTHER,
    TRANSACTION_TYPES,
    CategoryName,
    Description,
    Money,
    Transaction,
    TransactionType,
    to_major,
    to_money,
)
from fingestor.domain.recurrence import new_id

# Lowercased headers that identify an investment export
INVESTMENT_HEADER_KEYWORDS = ("ticker", "isin", "shares", "price / share", "no. of shares", "action")

TRANSACTION_HEADER_KEYWORDS = ("categoria", "descrição", "category", "description")

EXPORT_HEADERS = ["Id", "Date", "Description", "Amount", "Type", "Category"]

_ID_COLUMNS = ("id", "Id")
_DATE_COLUMNS = ("date", "Date", "Data do movimento")
_DESCRIPTION_COLUMNS = ("description", "Description", "Descrição")
_AMOUNT_COLUMNS = ("amount", "Amount", "Debito", "Credito")
_TYPE_COLUMNS = ("type", "Type")
_CATEGORY_COLUMNS = ("category", "Category", "Categoria")


def validate_transaction(
    description: str, amount: Money, type: str
) -> tuple[bool, str | None]:
    """Validate user input for a new transaction.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not description.strip():
        return False, "Description is required"
    if amount <= 0:
        return False, "Amount must be positive"
    if type not in TRANSACTION_TYPES:
        return False, f"Type must be one of: {', '.join(TRANSACTION_TYPES)}"
    return True, None


def create_transaction(
    on: date,
    description: str,
    amount: Money,
    type: TransactionType,
    category: str | None = None,
    make_id: Callable[[], str] = new_id,
) -> Transaction:
    """Build a transaction, defaulting the category to "Other"."""
    return Transaction(
        id=make_id(),
        date=on,
        description=Description(description.strip()),
        amount=Money(abs(amount)),
        type=type,
        category=CategoryName(category) if category else OTHER,
    )


def remove_by_id(transactions: Iterable[Transaction], txn_id: str) -> tuple[list[Transaction], bool]:
    """Remove a transaction by id.

    Returns:
        Tuple of (remaining_transactions, removed).
    """
    transactions = list(transactions)
    remaining = [t for t in transactions if t.id != txn_id]
    return remaining, len(remaining) != len(transactions)


def is_investment_export(headers: Iterable[str]) -> bool:
    """Check whether file headers look like an investment export."""
    return any(h.strip().lower() in INVESTMENT_HEADER_KEYWORDS for h in headers)


def is_transaction_export(headers: Iterable[str]) -> bool:
    """Check whether file headers look like a transaction export."""
    return any(h.strip().lower() in TRANSACTION_HEADER_KEYWORDS for h in headers)


def first_value(row: dict[str, Any], columns: Iterable[str]) -> Any:
    """Return the first non-empty value among candidate columns, or None."""
    for column in columns:
        value = row.get(column)
        if value is None:
            continue
        if isinstance(value, float) and value != value:  # NaN from pandas
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def parse_transaction_row(
    row: dict[str, Any],
    today: date,
    normalize_date: Callable[[str], date] = parse_date,
    make_id: Callable[[], str] = new_id,
) -> Transaction | None:
    """Parse an imported row into a transaction.

    Columns are looked up by several aliases (English export headers and
    Portuguese bank statement headers). A row with a "Credito" column and no
    explicit type is income; otherwise it is an expense.

    Args:
        row: Row as a dictionary of column name to raw value.
        today: Date used when the row has no date.
        normalize_date: Parser for raw date strings.
        make_id: Factory used when the row has no id.

    Returns:
        Transaction if valid, None if the row should be skipped.
    """
    raw_amount = first_value(row, _AMOUNT_COLUMNS)
    if raw_amount is None:
        return None
    try:
        amount = Money(abs(to_money(raw_amount)))
    except ValueError:
        return None
    if amount == 0:
        return None

    raw_date = first_value(row, _DATE_COLUMNS)
    if raw_date is None:
        txn_date = today
    elif isinstance(raw_date, date):
        txn_date = raw_date
    else:
        try:
            txn_date = normalize_date(str(raw_date))
        except ValueError:
            return None

    raw_type = first_value(row, _TYPE_COLUMNS)
    if raw_type is None:
        raw_type = "income" if first_value(row, ("Credito",)) is not None else "expense"
    txn_type = str(raw_type).strip().lower()
    if txn_type not in TRANSACTION_TYPES:
        return None

    raw_id = first_value(row, _ID_COLUMNS)
    description = first_value(row, _DESCRIPTION_COLUMNS) or "No description"
    category = first_value(row, _CATEGORY_COLUMNS) or OTHER

    return Transaction(
        id=str(raw_id).strip() if raw_id is not None else make_id(),
        date=txn_date,
        description=Description(str(description).strip()),
        amount=amount,
        type=cast(TransactionType, txn_type),
        category=CategoryName(str(category).strip()),
    )


def merge_imported(
    existing: Iterable[Transaction], imported: Iterable[Transaction]
) -> tuple[list[Transaction], list[Transaction]]:
    """Append imported transactions, skipping ids that already exist.

    Returns:
        Tuple of (merged_transactions, skipped_duplicates).
    """
    merged = list(existing)
    seen = {t.id for t in merged}
    skipped: list[Transaction] = []

    for txn in imported:
        if txn.id in seen:
            skipped.append(txn)
            continue
        seen.add(txn.id)
        merged.append(txn)

    return merged, skipped


def to_export_row(txn: Transaction) -> dict[str, Any]:
    """Map a transaction to an export row keyed by EXPORT_HEADERS."""
    return {
        "Id": txn.id,
        "Date": txn.date.isoformat(),
        "Description": txn.description,
        "Amount": to_major(txn.amount),
        "Type": txn.type,
        "Category": txn.category,
    }
