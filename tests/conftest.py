"""Pytest fixtures for testing"""

import pytest
from fastapi.testclient import TestClient
from finance_tracker.api.main import create_app
from finance_tracker.api.dependencies import get_store
from finance_tracker.domain.models import RecurringTransaction, Transaction, TransactionType
from finance_tracker.infrastructure.storage.json_store import JsonLedgerStore


@pytest.fixture
def store(tmp_path) -> JsonLedgerStore:
    """Fresh JSON-file ledger seeded with default categories"""
    return JsonLedgerStore(tmp_path / "data.json")


@pytest.fixture
def client(store: JsonLedgerStore) -> TestClient:
    """Create FastAPI test client backed by the temporary store"""
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    return TestClient(app)


@pytest.fixture
def rent() -> RecurringTransaction:
    """Monthly rent starting mid-January 2024, never materialized"""
    return RecurringTransaction(
        id="rec-rent",
        description="Rent",
        amount=1200.0,
        type=TransactionType.EXPENSE,
        frequency="monthly",
        start_date="2024-01-15",
        last_added_date=None,
        expense_category="bills",
    )


@pytest.fixture
def sample_ledger() -> list[Transaction]:
    """Existing ledger, most recent first"""
    return [
        Transaction(
            id="tx-salary",
            description="Salary",
            amount=3000.0,
            type=TransactionType.INCOME,
            date="2024-03-01",
            income_category="salary",
        ),
        Transaction(
            id="tx-groceries",
            description="Groceries",
            amount=85.5,
            type=TransactionType.EXPENSE,
            date="2024-02-10",
            expense_category="food",
        ),
        Transaction(
            id="tx-bus",
            description="Bus pass",
            amount=40.0,
            type=TransactionType.EXPENSE,
            date="2024-01-05",
            expense_category="transport",
        ),
    ]
