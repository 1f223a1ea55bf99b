"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache

from fastapi import Request

from finance_tracker.config import settings
from finance_tracker.infrastructure.storage.base import LedgerStore
from finance_tracker.infrastructure.storage.factory import build_store


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache
def get_store() -> LedgerStore:
    """Provide the configured ledger store (one instance per process)"""
    return build_store(settings)
