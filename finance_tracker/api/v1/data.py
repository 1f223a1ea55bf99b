"""Whole-ledger endpoints: export, import and session start-up"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from finance_tracker.api.dependencies import get_request_id, get_store
from finance_tracker.api.v1.schemas import (
    CategorySchema,
    DataResponse,
    RecurringSchema,
    ReplaceDataRequest,
    SessionResponse,
    TransactionSchema,
)
from finance_tracker.domain.exceptions import InvalidRecurringDefinitionError, LedgerLoadError
from finance_tracker.infrastructure.storage.base import LedgerStore
from finance_tracker.services.session import StoreGateway, start_session

router = APIRouter()


@router.get("/data", response_model=DataResponse)
def get_data(store: LedgerStore = Depends(get_store)):
    """Full ledger document: transactions, both category pools, recurring definitions"""
    return DataResponse.from_snapshot(store.load())


@router.post("/replace-data", status_code=204)
def replace_data(payload: ReplaceDataRequest, store: LedgerStore = Depends(get_store)):
    """Import a dataset, overwriting transactions and categories; recurring definitions stay"""
    store.replace_data(
        transactions=[t.to_domain() for t in payload.transactions],
        expense_categories=[c.to_domain() for c in payload.expense_categories],
        income_categories=[c.to_domain() for c in payload.income_categories],
    )
    return Response(status_code=204)


@router.post("/session", response_model=SessionResponse)
async def create_session(
    request: Request,
    today: Optional[date] = Query(None, description="Reference date, defaults to the server's today"),
    store: LedgerStore = Depends(get_store),
):
    """
    Start a session: materialize due recurring transactions and return the ledger.

    Flow:
    1. Load ledger + recurring definitions
    2. Generate every occurrence due up to today (back-fill included)
    3. Persist ledger and advanced cursors in one atomic write
    4. Return the committed state and how many transactions were added
    """
    request_id = get_request_id(request)

    try:
        state = await start_session(StoreGateway(store), today=today, request_id=request_id)
    except InvalidRecurringDefinitionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except LedgerLoadError as e:
        logging.warning(f"Session start failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail=str(e))

    return SessionResponse(
        transactions=[TransactionSchema.from_domain(t) for t in state.transactions],
        expense_categories=[CategorySchema.from_domain(c) for c in state.expense_categories],
        income_categories=[CategorySchema.from_domain(c) for c in state.income_categories],
        recurring_transactions=[RecurringSchema.from_domain(r) for r in state.recurring],
        added_count=state.added_count,
        notice=state.notice,
    )
