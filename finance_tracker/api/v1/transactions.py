"""Transaction CRUD endpoints"""

import uuid

from fastapi import APIRouter, Depends, HTTPException

from finance_tracker.api.dependencies import get_store
from finance_tracker.api.v1.schemas import TransactionCreate, TransactionSchema
from finance_tracker.domain.exceptions import NotFoundError
from finance_tracker.infrastructure.storage.base import LedgerStore

router = APIRouter()


@router.post("/transactions", response_model=TransactionSchema)
def create_transaction(payload: TransactionCreate, store: LedgerStore = Depends(get_store)):
    transaction = store.upsert_transaction(payload.to_domain(str(uuid.uuid4())))
    return TransactionSchema.from_domain(transaction)


@router.put("/transactions/{transaction_id}", response_model=TransactionSchema)
def update_transaction(transaction_id: str, payload: TransactionCreate, store: LedgerStore = Depends(get_store)):
    """Replace an existing transaction; the id in the path wins over any id in the body"""
    try:
        transaction = store.upsert_transaction(payload.to_domain(transaction_id), must_exist=True)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return TransactionSchema.from_domain(transaction)


@router.delete("/transactions/{transaction_id}")
def delete_transaction(transaction_id: str, store: LedgerStore = Depends(get_store)):
    store.delete_transaction(transaction_id)
    return {"id": transaction_id}
