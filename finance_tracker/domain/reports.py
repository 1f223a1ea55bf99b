"""Ledger filtering, sorting and totals"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from finance_tracker.domain.models import Transaction, TransactionType


@dataclass
class TransactionFilters:
    """Criteria applied to the ledger before summarizing.

    `category` only applies when `type` is set, since expense and income
    categories are separate pools.
    """

    type: Optional[TransactionType] = None
    category: Optional[str] = None
    start_date: Optional[str] = None  # inclusive 'YYYY-MM-DD'
    end_date: Optional[str] = None  # inclusive 'YYYY-MM-DD'


@dataclass
class LedgerSummary:
    total_income: float = 0.0
    total_expense: float = 0.0
    balance: float = 0.0
    expenses_by_category: Dict[str, float] = field(default_factory=dict)
    income_by_category: Dict[str, float] = field(default_factory=dict)


def filter_transactions(transactions: Sequence[Transaction], filters: TransactionFilters) -> List[Transaction]:
    items = list(transactions)

    if filters.type is not None:
        items = [t for t in items if t.type == filters.type]
        if filters.category:
            items = [t for t in items if t.category == filters.category]
    if filters.start_date:
        items = [t for t in items if t.date >= filters.start_date]
    if filters.end_date:
        items = [t for t in items if t.date <= filters.end_date]

    return items


def sort_transactions(transactions: Sequence[Transaction], key: str = "date", direction: str = "desc") -> List[Transaction]:
    if key not in ("date", "amount"):
        raise ValueError(f"Unsupported sort key: {key}")
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unsupported sort direction: {direction}")
    return sorted(transactions, key=lambda t: getattr(t, key), reverse=direction == "desc")


def summarize(transactions: Sequence[Transaction]) -> LedgerSummary:
    """Totals per type and per category; uncategorized entries count toward totals only"""
    summary = LedgerSummary()

    for t in transactions:
        if t.type == TransactionType.INCOME:
            summary.total_income += t.amount
            if t.income_category:
                summary.income_by_category[t.income_category] = (
                    summary.income_by_category.get(t.income_category, 0.0) + t.amount
                )
        else:
            summary.total_expense += t.amount
            if t.expense_category:
                summary.expenses_by_category[t.expense_category] = (
                    summary.expenses_by_category.get(t.expense_category, 0.0) + t.amount
                )

    summary.balance = summary.total_income - summary.total_expense
    return summary
