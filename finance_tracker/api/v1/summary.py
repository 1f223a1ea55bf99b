"""GET /v1/summary - totals over a filtered view of the ledger"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from finance_tracker.api.dependencies import get_store
from finance_tracker.api.v1.schemas import SummaryResponse, TransactionSchema
from finance_tracker.domain.models import TransactionType
from finance_tracker.domain.reports import TransactionFilters, filter_transactions, sort_transactions, summarize
from finance_tracker.infrastructure.storage.base import LedgerStore

router = APIRouter()


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    type: Optional[TransactionType] = Query(None, description="income or expense"),
    category: Optional[str] = Query(None, description="Category value; applies only with type"),
    start_date: Optional[str] = Query(None, alias="startDate", description="Inclusive YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Inclusive YYYY-MM-DD"),
    sort_key: Literal["date", "amount"] = Query("date", alias="sortKey"),
    direction: Literal["asc", "desc"] = Query("desc"),
    store: LedgerStore = Depends(get_store),
):
    """
    Income, expense and balance totals plus per-category sums.

    Returns:
        Totals and the matching transactions in the requested order
    """
    filters = TransactionFilters(type=type, category=category, start_date=start_date, end_date=end_date)
    items = sort_transactions(filter_transactions(store.load().transactions, filters), sort_key, direction)
    summary = summarize(items)

    return SummaryResponse(
        total_income=summary.total_income,
        total_expense=summary.total_expense,
        balance=summary.balance,
        expenses_by_category=summary.expenses_by_category,
        income_by_category=summary.income_by_category,
        transactions=[TransactionSchema.from_domain(t) for t in items],
    )
