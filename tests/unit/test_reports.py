"""Unit tests for ledger filtering and totals"""

import pytest
from finance_tracker.domain.models import Transaction, TransactionType
from finance_tracker.domain.reports import TransactionFilters, filter_transactions, sort_transactions, summarize


def test_summarize_totals_and_categories(sample_ledger: list[Transaction]):
    summary = summarize(sample_ledger)

    assert summary.total_income == 3000.0
    assert summary.total_expense == pytest.approx(125.5)
    assert summary.balance == pytest.approx(2874.5)
    assert summary.expenses_by_category == {"food": 85.5, "transport": 40.0}
    assert summary.income_by_category == {"salary": 3000.0}


def test_summarize_uncategorized_counts_toward_totals_only():
    transactions = [
        Transaction(id="1", description="Cash", amount=20.0, type=TransactionType.EXPENSE, date="2024-01-01"),
    ]

    summary = summarize(transactions)

    assert summary.total_expense == 20.0
    assert summary.expenses_by_category == {}


def test_summarize_empty():
    summary = summarize([])
    assert summary.balance == 0.0


def test_filter_by_type_and_category(sample_ledger: list[Transaction]):
    filters = TransactionFilters(type=TransactionType.EXPENSE, category="food")

    assert [t.id for t in filter_transactions(sample_ledger, filters)] == ["tx-groceries"]


def test_category_ignored_without_type(sample_ledger: list[Transaction]):
    filters = TransactionFilters(category="food")

    assert len(filter_transactions(sample_ledger, filters)) == 3


def test_filter_by_inclusive_date_range(sample_ledger: list[Transaction]):
    filters = TransactionFilters(start_date="2024-02-10", end_date="2024-03-01")

    assert [t.id for t in filter_transactions(sample_ledger, filters)] == ["tx-salary", "tx-groceries"]


def test_sort_by_amount_ascending(sample_ledger: list[Transaction]):
    ordered = sort_transactions(sample_ledger, key="amount", direction="asc")

    assert [t.amount for t in ordered] == [40.0, 85.5, 3000.0]


def test_sort_rejects_unknown_key(sample_ledger: list[Transaction]):
    with pytest.raises(ValueError):
        sort_transactions(sample_ledger, key="description")
