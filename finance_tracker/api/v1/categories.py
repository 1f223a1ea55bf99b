"""Expense and income category endpoints"""

from fastapi import APIRouter, Depends, HTTPException

from finance_tracker.api.dependencies import get_store
from finance_tracker.api.v1.schemas import CategoryLabel, CategorySchema
from finance_tracker.domain.exceptions import NotFoundError
from finance_tracker.domain.models import Category, CategoryKind
from finance_tracker.infrastructure.storage.base import LedgerStore, new_category_value


def build_router(kind: CategoryKind) -> APIRouter:
    """Same three routes for each pool, mounted under its own prefix"""
    router = APIRouter()

    @router.post("", response_model=CategorySchema)
    def create_category(payload: CategoryLabel, store: LedgerStore = Depends(get_store)):
        category = Category(value=new_category_value(payload.label), label=payload.label)
        return CategorySchema.from_domain(store.upsert_category(kind, category))

    @router.put("/{value}", response_model=CategorySchema)
    def update_category(value: str, payload: CategoryLabel, store: LedgerStore = Depends(get_store)):
        try:
            category = store.upsert_category(kind, Category(value=value, label=payload.label), must_exist=True)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="Category not found")
        return CategorySchema.from_domain(category)

    @router.delete("/{value}")
    def delete_category(value: str, store: LedgerStore = Depends(get_store)):
        """Remove the category and clear it from every transaction that used it"""
        store.delete_category(kind, value)
        return {"value": value}

    return router


expense_router = build_router(CategoryKind.EXPENSE)
income_router = build_router(CategoryKind.INCOME)
