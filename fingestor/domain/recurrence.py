"""Pure functions for recurring transaction generation.

Each schedule keeps a cursor (its last processed date, or its start date before
the first run). Processing walks the cursor forward one period at a time up to
"today", emitting a transaction for every period that fell due. Running again
with the same "today" emits nothing, so processing can happen on every load
without a background scheduler.

All monetary amounts are in cents (Money type).
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import date
from uuid import uuid4

from fingestor.dates import advance
from fingestor.domain.models import (
    END_CONDITIONS,
    FREQUENCIES,
    TRANSACTION_TYPES,
    CategoryName,
    Description,
    EndCondition,
    Frequency,
    Money,
    RecurringSchedule,
    Transaction,
    TransactionType,
)

# Used when a count-limited schedule has no occurrence count configured
DEFAULT_OCCURRENCE_LIMIT = 999


@dataclass(frozen=True)
class RecurrenceResult:
    """Immutable outcome of a recurrence pass."""

    transactions: list[Transaction]
    schedules: list[RecurringSchedule]


def new_id() -> str:
    """Generate a new record id."""
    return uuid4().hex


def schedule_cursor(schedule: RecurringSchedule) -> date:
    """Return the date up to which a schedule has generated transactions."""
    return schedule.last_processed_date or schedule.start_date


def has_reached_end(schedule: RecurringSchedule, next_date: date) -> bool:
    """Check whether the schedule's end condition stops it before next_date.

    Args:
        schedule: Schedule being processed.
        next_date: Date of the occurrence about to be emitted.

    Returns:
        True if the schedule must be deactivated instead of emitting.
    """
    if schedule.end_condition == "count":
        limit = schedule.occ_count if schedule.occ_count is not None else DEFAULT_OCCURRENCE_LIMIT
        return schedule.processed_count >= limit
    if schedule.end_condition == "date":
        return schedule.occ_until is not None and next_date > schedule.occ_until
    return False


def occurrence_for(schedule: RecurringSchedule, on: date, make_id: Callable[[], str]) -> Transaction:
    """Build the transaction a schedule emits on a given date."""
    return Transaction(
        id=make_id(),
        date=on,
        description=schedule.description,
        amount=schedule.amount,
        type=schedule.type,
        category=schedule.category,
    )


def process_schedule(
    schedule: RecurringSchedule,
    today: date,
    make_id: Callable[[], str] = new_id,
) -> tuple[list[Transaction], RecurringSchedule]:
    """Catch a single schedule up to today.

    Args:
        schedule: Schedule to process.
        today: Reference calendar date; occurrences on today are due.
        make_id: Factory for new transaction ids.

    Returns:
        Tuple of (emitted_transactions, updated_schedule). Inactive schedules
        are returned unchanged with no transactions.
    """
    if not schedule.active:
        return [], schedule

    emitted: list[Transaction] = []
    cursor = schedule_cursor(schedule)

    while True:
        next_date = advance(cursor, schedule.frequency)
        if next_date > today:
            break

        if has_reached_end(schedule, next_date):
            schedule = replace(schedule, active=False)
            break

        emitted.append(occurrence_for(schedule, next_date, make_id))
        schedule = replace(
            schedule,
            processed_count=schedule.processed_count + 1,
            last_processed_date=next_date,
        )
        cursor = next_date

    return emitted, schedule


def process_recurring(
    schedules: Iterable[RecurringSchedule],
    today: date,
    make_id: Callable[[], str] = new_id,
) -> RecurrenceResult:
    """Generate every due transaction for a set of schedules.

    The returned transactions and schedules must be persisted together;
    saving one without the other would re-emit the same periods next time.

    Args:
        schedules: All recurring schedules, active or not.
        today: Reference calendar date.
        make_id: Factory for new transaction ids.

    Returns:
        RecurrenceResult with new transactions (in schedule order, then date
        order) and the full list of schedules with updated cursors.
    """
    new_transactions: list[Transaction] = []
    updated: list[RecurringSchedule] = []

    for schedule in schedules:
        emitted, schedule = process_schedule(schedule, today, make_id)
        new_transactions.extend(emitted)
        updated.append(schedule)

    return RecurrenceResult(transactions=new_transactions, schedules=updated)


def create_schedule(
    description: Description,
    amount: Money,
    type: TransactionType,
    category: CategoryName,
    frequency: Frequency,
    start_date: date,
    end_condition: EndCondition = "count",
    occ_count: int | None = None,
    occ_until: date | None = None,
    make_id: Callable[[], str] = new_id,
) -> tuple[RecurringSchedule | None, str | None]:
    """Validate input and build a new schedule for a transaction marked recurring.

    Returns:
        Tuple of (schedule, error_message). Exactly one is None.
    """
    if amount <= 0:
        return None, "Amount must be positive"
    if type not in TRANSACTION_TYPES:
        return None, f"Unknown transaction type '{type}'"
    if frequency not in FREQUENCIES:
        return None, f"Unknown frequency '{frequency}'"
    if end_condition not in END_CONDITIONS:
        return None, f"Unknown end condition '{end_condition}'"
    if occ_count is not None and occ_count < 1:
        return None, "Occurrence count must be at least 1"
    if occ_until is not None and occ_until < start_date:
        return None, "End date is before the start date"

    schedule = RecurringSchedule(
        id=make_id(),
        description=description,
        amount=amount,
        type=type,
        category=category,
        frequency=frequency,
        start_date=start_date,
        end_condition=end_condition,
        occ_count=occ_count,
        occ_until=occ_until,
    )
    return schedule, None


def stop_schedule(
    schedules: Iterable[RecurringSchedule], schedule_id: str
) -> tuple[list[RecurringSchedule], str | None]:
    """Deactivate a schedule by id.

    Returns:
        Tuple of (schedules, error_message). Schedules are unchanged on error.
    """
    schedules = list(schedules)
    for i, schedule in enumerate(schedules):
        if schedule.id == schedule_id:
            if not schedule.active:
                return schedules, "Schedule is already inactive"
            schedules[i] = replace(schedule, active=False)
            return schedules, None
    return schedules, f"Schedule {schedule_id} not found"
