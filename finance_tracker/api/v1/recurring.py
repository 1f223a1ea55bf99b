"""Recurring definition endpoints"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from finance_tracker.api.dependencies import get_store
from finance_tracker.api.v1.schemas import ProcessRecurringRequest, RecurringCreate, RecurringSchema, UpcomingResponse
from finance_tracker.domain.exceptions import InvalidRecurringDefinitionError, NotFoundError
from finance_tracker.domain.recurring import upcoming_dates
from finance_tracker.infrastructure.storage.base import LedgerStore

router = APIRouter()


@router.post("/recurring", response_model=RecurringSchema)
def create_recurring(payload: RecurringCreate, store: LedgerStore = Depends(get_store)):
    """New definitions start with no materialized occurrences"""
    recurring = store.upsert_recurring(payload.to_domain(str(uuid.uuid4()), last_added_date=None))
    return RecurringSchema.from_domain(recurring)


@router.put("/recurring/{recurring_id}", response_model=RecurringSchema)
def update_recurring(recurring_id: str, payload: RecurringCreate, store: LedgerStore = Depends(get_store)):
    """User edit of a definition; the stored lastAddedDate cursor is kept as is"""
    existing = store.get_recurring(recurring_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Recurring transaction not found")

    try:
        recurring = store.upsert_recurring(
            payload.to_domain(recurring_id, last_added_date=existing.last_added_date),
            must_exist=True,
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Recurring transaction not found")
    return RecurringSchema.from_domain(recurring)


@router.delete("/recurring/{recurring_id}")
def delete_recurring(recurring_id: str, store: LedgerStore = Depends(get_store)):
    store.delete_recurring(recurring_id)
    return {"id": recurring_id}


@router.post("/recurring/process", status_code=204)
def process_recurring(payload: ProcessRecurringRequest, store: LedgerStore = Depends(get_store)):
    """Commit a client-side materialization: ledger and cursors in a single write"""
    store.atomic_replace_ledger_and_recurring(
        [t.to_domain() for t in payload.transactions],
        [r.to_domain() for r in payload.recurring_transactions],
    )
    return Response(status_code=204)


@router.get("/recurring/{recurring_id}/upcoming", response_model=UpcomingResponse)
def get_upcoming(
    recurring_id: str,
    count: int = Query(3, ge=1, le=36, description="Number of upcoming occurrences"),
    store: LedgerStore = Depends(get_store),
):
    """Next occurrences that have not been materialized yet"""
    recurring = store.get_recurring(recurring_id)
    if recurring is None:
        raise HTTPException(status_code=404, detail="Recurring transaction not found")

    try:
        dates = upcoming_dates(recurring, count)
    except InvalidRecurringDefinitionError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return UpcomingResponse(recurring_id=recurring_id, dates=dates)
