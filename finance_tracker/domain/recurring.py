"""Recurring transaction materialization.

Turns recurring definitions into the concrete ledger transactions that have come
due since each definition's cursor (``last_added_date``), back-filling every
missed month exactly once.
"""

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence, Tuple, Union

from finance_tracker.domain.exceptions import InvalidRecurringDefinitionError
from finance_tracker.domain.models import (
    Frequency,
    MaterializationResult,
    RecurringTransaction,
    Transaction,
    TransactionType,
)
from finance_tracker.utils.date_utils import add_months, format_iso_date, parse_iso_date, to_date

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _parse_definition(definition: RecurringTransaction) -> Tuple[date, Optional[date]]:
    """Validate a definition and return its (start, cursor) dates.

    Raises:
        InvalidRecurringDefinitionError: On malformed dates, amount or type
    """
    try:
        start = parse_iso_date(definition.start_date)
    except ValueError as e:
        raise InvalidRecurringDefinitionError(definition.id, f"bad startDate: {e}") from e

    cursor = None
    if definition.last_added_date is not None:
        try:
            cursor = parse_iso_date(definition.last_added_date)
        except ValueError as e:
            raise InvalidRecurringDefinitionError(definition.id, f"bad lastAddedDate: {e}") from e

    amount = definition.amount
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount <= 0:
        raise InvalidRecurringDefinitionError(definition.id, f"amount must be positive, got {amount!r}")

    try:
        TransactionType(definition.type)
    except ValueError as e:
        raise InvalidRecurringDefinitionError(definition.id, f"unknown type {definition.type!r}") from e

    return start, cursor


def _first_due(start: date, cursor: Optional[date]) -> date:
    """The first occurrence is start_date; afterwards the cursor advanced by one month"""
    if cursor is None:
        return start
    return add_months(cursor, 1)


def _is_monthly(definition: RecurringTransaction) -> bool:
    return definition.frequency == Frequency.MONTHLY


def next_due_date(definition: RecurringTransaction) -> Optional[date]:
    """Next occurrence that has not been materialized yet, or None if there is none"""
    start, cursor = _parse_definition(definition)
    if not _is_monthly(definition):
        return start if cursor is None else None
    return _first_due(start, cursor)


def upcoming_dates(definition: RecurringTransaction, count: int) -> List[date]:
    """Next `count` occurrences after the cursor, regardless of today"""
    start, cursor = _parse_definition(definition)
    if not _is_monthly(definition):
        return [start] if cursor is None and count > 0 else []
    result = []
    due = _first_due(start, cursor)
    for _ in range(count):
        result.append(due)
        due = add_months(due, 1)
    return result


def due_dates(definition: RecurringTransaction, today: Union[date, datetime]) -> List[date]:
    """All occurrences due on or before today that are not yet materialized.

    Each occurrence is the previous one plus a calendar month, day clamped to the
    last day of shorter months. Once clamped, later occurrences keep the clamped day.
    """
    start, cursor = _parse_definition(definition)
    ref = to_date(today)

    if not _is_monthly(definition):
        logger.warning(
            "Unsupported recurring frequency, at most one occurrence is generated",
            extra={"recurring_id": definition.id, "frequency": str(definition.frequency)},
        )
        if cursor is None and start <= ref:
            return [start]
        return []

    result = []
    due = _first_due(start, cursor)
    while due <= ref:
        result.append(due)
        due = add_months(due, 1)
    return result


def _synthesize(definition: RecurringTransaction, due: date, transaction_id: str) -> Transaction:
    return Transaction(
        id=transaction_id,
        description=definition.description,
        amount=definition.amount,
        type=TransactionType(definition.type),
        date=format_iso_date(due),
        expense_category=definition.expense_category,
        income_category=definition.income_category,
    )


def sort_by_date_desc(transactions: Sequence[Transaction]) -> List[Transaction]:
    """Most recent first; stable, so equal dates keep their incoming order"""
    return sorted(transactions, key=lambda t: t.date, reverse=True)


def materialize(
    transactions: List[Transaction],
    recurring: List[RecurringTransaction],
    today: Union[date, datetime],
    id_factory: Callable[[], str] = _new_id,
) -> MaterializationResult:
    """
    Generate every due, not yet recorded occurrence of each recurring definition.

    Each definition is processed independently: occurrences from its cursor up to
    and including today are synthesized in date order and the cursor moves to the
    last one. Inputs are never mutated.

    Args:
        transactions: Current ledger
        recurring: Current recurring definitions
        today: Reference date; a datetime is truncated to its date
        id_factory: Produces ids for new transactions

    Returns:
        MaterializationResult. When nothing was due, the given lists are returned
        unchanged with added_count 0 so callers can skip persistence.

    Raises:
        InvalidRecurringDefinitionError: A definition has malformed dates or values
    """
    ref = to_date(today)
    new_transactions: List[Transaction] = []
    updated: List[RecurringTransaction] = []

    for definition in recurring:
        dates = due_dates(definition, ref)
        if not dates:
            updated.append(definition)
            continue

        for due in dates:
            new_transactions.append(_synthesize(definition, due, id_factory()))
        updated.append(replace(definition, last_added_date=format_iso_date(dates[-1])))

    if not new_transactions:
        return MaterializationResult(transactions=transactions, recurring=recurring, added_count=0)

    # New entries go first so that same-day ties list them ahead of existing ones
    merged = sort_by_date_desc(new_transactions + list(transactions))
    return MaterializationResult(transactions=merged, recurring=updated, added_count=len(new_transactions))
