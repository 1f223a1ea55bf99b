"""Unit tests for recurring transaction materialization"""

import pytest
from dataclasses import asdict, replace
from datetime import date, datetime
from finance_tracker.domain.exceptions import InvalidRecurringDefinitionError
from finance_tracker.domain.models import RecurringTransaction, Transaction, TransactionType
from finance_tracker.domain.recurring import due_dates, materialize, next_due_date, upcoming_dates


def _ids():
    counter = iter(range(1, 1000))
    return lambda: f"gen-{next(counter)}"


def test_backfill_generates_every_missed_month(rent: RecurringTransaction):
    """Test dormant definition catches up on all months up to today"""
    result = materialize([], [rent], date(2024, 4, 20))

    assert result.added_count == 4
    assert sorted(t.date for t in result.transactions) == [
        "2024-01-15",
        "2024-02-15",
        "2024-03-15",
        "2024-04-15",
    ]
    assert result.recurring[0].last_added_date == "2024-04-15"


def test_generated_transactions_copy_definition_fields(rent: RecurringTransaction):
    """Test description, amount, type and category come from the definition"""
    result = materialize([], [rent], date(2024, 1, 15), id_factory=_ids())

    assert result.transactions == [
        Transaction(
            id="gen-1",
            description="Rent",
            amount=1200.0,
            type=TransactionType.EXPENSE,
            date="2024-01-15",
            expense_category="bills",
            income_category=None,
        )
    ]


def test_second_run_same_day_is_noop(rent: RecurringTransaction, sample_ledger: list[Transaction]):
    """Test idempotence: nothing new on an immediate second pass"""
    first = materialize(sample_ledger, [rent], date(2024, 4, 20))
    second = materialize(first.transactions, first.recurring, date(2024, 4, 20))

    assert second.added_count == 0
    assert second.transactions is first.transactions
    assert second.recurring is first.recurring


def test_nothing_due_returns_inputs_unchanged(sample_ledger: list[Transaction]):
    """Test fast path hands back the very same lists"""
    future = RecurringTransaction(
        id="rec-future",
        description="Gym",
        amount=30.0,
        type=TransactionType.EXPENSE,
        frequency="monthly",
        start_date="2024-06-01",
    )
    recurring = [future]

    result = materialize(sample_ledger, recurring, date(2024, 5, 31))

    assert result.added_count == 0
    assert result.transactions is sample_ledger
    assert result.recurring is recurring


def test_no_generated_date_after_today(rent: RecurringTransaction):
    """Test occurrences stop at today"""
    today = date(2024, 7, 14)
    result = materialize([], [rent], today)

    assert result.added_count == 6
    assert all(t.date <= "2024-07-14" for t in result.transactions)
    assert result.recurring[0].last_added_date == "2024-06-15"


def test_due_on_today_is_included(rent: RecurringTransaction):
    result = materialize([], [rent], date(2024, 2, 15))

    assert [t.date for t in result.transactions] == ["2024-02-15", "2024-01-15"]


def test_datetime_today_is_truncated_to_date(rent: RecurringTransaction):
    """Test time of day does not hide an occurrence due today"""
    result = materialize([], [rent], datetime(2024, 1, 15, 23, 59, 59))

    assert result.added_count == 1


def test_month_end_clamps_to_leap_day():
    """Test Jan 31 advances to Feb 29 in a leap year, not into March"""
    definition = RecurringTransaction(
        id="rec-eom",
        description="Insurance",
        amount=99.0,
        type=TransactionType.EXPENSE,
        frequency="monthly",
        start_date="2024-01-31",
    )

    result = materialize([], [definition], date(2024, 3, 1))

    assert sorted(t.date for t in result.transactions) == ["2024-01-31", "2024-02-29"]
    assert result.recurring[0].last_added_date == "2024-02-29"


def test_month_end_clamps_in_non_leap_year():
    definition = RecurringTransaction(
        id="rec-eom",
        description="Insurance",
        amount=99.0,
        type=TransactionType.EXPENSE,
        frequency="monthly",
        start_date="2023-01-31",
    )

    result = materialize([], [definition], date(2023, 3, 1))

    assert sorted(t.date for t in result.transactions) == ["2023-01-31", "2023-02-28"]


def test_clamped_day_carries_forward_from_cursor():
    """Test the next occurrence is the cursor plus one month, so a clamped day stays clamped"""
    definition = RecurringTransaction(
        id="rec-eom",
        description="Insurance",
        amount=99.0,
        type=TransactionType.EXPENSE,
        frequency="monthly",
        start_date="2024-01-31",
        last_added_date="2024-02-29",
    )

    result = materialize([], [definition], date(2024, 3, 30))

    assert [t.date for t in result.transactions] == ["2024-03-29"]
    assert result.recurring[0].last_added_date == "2024-03-29"


def test_single_occurrence_when_cursor_one_month_back():
    """Test cursor exactly one month before today yields exactly today's occurrence"""
    definition = RecurringTransaction(
        id="rec-sub",
        description="Streaming",
        amount=12.99,
        type=TransactionType.EXPENSE,
        frequency="monthly",
        start_date="2024-01-01",
        last_added_date="2024-03-01",
    )

    result = materialize([], [definition], date(2024, 4, 1))

    assert result.added_count == 1
    assert result.transactions[0].date == "2024-04-01"
    assert result.recurring[0].last_added_date == "2024-04-01"


def test_cursor_across_year_boundary():
    definition = RecurringTransaction(
        id="rec-sub",
        description="Streaming",
        amount=12.99,
        type=TransactionType.EXPENSE,
        frequency="monthly",
        start_date="2023-11-05",
        last_added_date="2023-12-05",
    )

    result = materialize([], [definition], date(2024, 2, 10))

    assert sorted(t.date for t in result.transactions) == ["2024-01-05", "2024-02-05"]


def test_existing_transactions_preserved(rent: RecurringTransaction, sample_ledger: list[Transaction]):
    """Test merge keeps every pre-existing transaction unmodified"""
    before = {t.id: asdict(t) for t in sample_ledger}

    result = materialize(sample_ledger, [rent], date(2024, 4, 20))

    after = {t.id: asdict(t) for t in result.transactions}
    assert len(result.transactions) == len(sample_ledger) + 4
    for tx_id, fields in before.items():
        assert after[tx_id] == fields


def test_merged_ledger_sorted_most_recent_first(rent: RecurringTransaction, sample_ledger: list[Transaction]):
    result = materialize(sample_ledger, [rent], date(2024, 4, 20))

    dates = [t.date for t in result.transactions]
    assert dates == sorted(dates, reverse=True)
    assert dates[0] == "2024-04-15"


def test_same_day_ties_put_new_transactions_first(sample_ledger: list[Transaction]):
    """Test stable sort: new entries precede existing ones on the same date"""
    payday = RecurringTransaction(
        id="rec-pay",
        description="Side gig",
        amount=500.0,
        type=TransactionType.INCOME,
        frequency="monthly",
        start_date="2024-03-01",
        income_category="freelance",
    )

    result = materialize(sample_ledger, [payday], date(2024, 3, 1), id_factory=_ids())

    assert [t.id for t in result.transactions[:2]] == ["gen-1", "tx-salary"]


def test_definitions_processed_independently(rent: RecurringTransaction):
    salary = RecurringTransaction(
        id="rec-salary",
        description="Salary",
        amount=3000.0,
        type=TransactionType.INCOME,
        frequency="monthly",
        start_date="2024-03-25",
        income_category="salary",
    )

    result = materialize([], [rent, salary], date(2024, 4, 20))

    assert result.added_count == 5
    assert [r.last_added_date for r in result.recurring] == ["2024-04-15", "2024-03-25"]
    assert sum(1 for t in result.transactions if t.type == TransactionType.INCOME) == 1


def test_inputs_are_not_mutated(rent: RecurringTransaction, sample_ledger: list[Transaction]):
    ledger_copy = list(sample_ledger)

    materialize(sample_ledger, [rent], date(2024, 4, 20))

    assert rent.last_added_date is None
    assert sample_ledger == ledger_copy


def test_untouched_definitions_keep_identity(rent: RecurringTransaction):
    """Test only advanced definitions are replaced by copies"""
    dormant = replace(rent, id="rec-later", start_date="2025-01-01")

    result = materialize([], [rent, dormant], date(2024, 2, 1))

    assert result.recurring[1] is dormant
    assert result.recurring[0] is not rent


def test_cursor_off_start_day_advances_from_cursor(rent: RecurringTransaction):
    """Test an edited start_date does not move occurrences off the cursor's day"""
    edited = replace(rent, start_date="2024-01-10", last_added_date="2024-03-01")

    result = materialize([], [edited], date(2024, 4, 1))

    assert [t.date for t in result.transactions] == ["2024-04-01"]
    assert result.recurring[0].last_added_date == "2024-04-01"


def test_cursor_before_start_never_repeats_its_month(rent: RecurringTransaction):
    """Test moving start_date later after a run does not add a second entry for that month"""
    moved = replace(rent, start_date="2024-05-25", last_added_date="2024-05-20")

    result = materialize([], [moved], date(2024, 6, 30))

    assert [t.date for t in result.transactions] == ["2024-06-20"]
    assert result.recurring[0].last_added_date == "2024-06-20"


def test_unsupported_frequency_yields_single_occurrence(rent: RecurringTransaction):
    """Test non-monthly definitions stop after their first occurrence"""
    weekly = replace(rent, frequency="weekly")

    first = materialize([], [weekly], date(2024, 4, 20))
    second = materialize(first.transactions, first.recurring, date(2024, 9, 1))

    assert first.added_count == 1
    assert first.recurring[0].last_added_date == "2024-01-15"
    assert second.added_count == 0


@pytest.mark.parametrize(
    "changes",
    [
        {"start_date": "2024-13-01"},
        {"start_date": "15/01/2024"},
        {"start_date": ""},
        {"start_date": None},
        {"last_added_date": "not-a-date"},
        {"amount": 0},
        {"amount": -5.0},
        {"type": "transfer"},
    ],
)
def test_malformed_definition_fails_fast(rent: RecurringTransaction, changes: dict):
    """Test precondition violations raise instead of silently skipping"""
    broken = replace(rent, **changes)

    with pytest.raises(InvalidRecurringDefinitionError) as exc_info:
        materialize([], [broken], date(2024, 4, 20))

    assert exc_info.value.recurring_id == "rec-rent"


def test_malformed_definition_aborts_whole_pass(rent: RecurringTransaction):
    broken = replace(rent, id="rec-broken", start_date="garbage")

    with pytest.raises(InvalidRecurringDefinitionError):
        materialize([], [rent, broken], date(2024, 4, 20))


def test_next_due_date(rent: RecurringTransaction):
    assert next_due_date(rent) == date(2024, 1, 15)
    assert next_due_date(replace(rent, last_added_date="2024-03-15")) == date(2024, 4, 15)
    assert next_due_date(replace(rent, frequency="weekly", last_added_date="2024-01-15")) is None


def test_upcoming_dates_clamp_month_end():
    definition = RecurringTransaction(
        id="rec-eom",
        description="Insurance",
        amount=99.0,
        type=TransactionType.EXPENSE,
        frequency="monthly",
        start_date="2023-11-30",
        last_added_date="2023-12-30",
    )

    assert upcoming_dates(definition, 4) == [
        date(2024, 1, 30),
        date(2024, 2, 29),
        date(2024, 3, 29),
        date(2024, 4, 29),
    ]


def test_due_dates_empty_before_start(rent: RecurringTransaction):
    assert due_dates(rent, date(2024, 1, 14)) == []
