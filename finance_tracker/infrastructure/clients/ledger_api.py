"""Ledger REST API HTTP client"""

from typing import Any, Dict, List, Optional, Set, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from finance_tracker.api.v1.schemas import (
    CategoryLabel,
    CategorySchema,
    LedgerDocument,
    ProcessRecurringRequest,
    RecurringSchema,
    TransactionSchema,
)
from finance_tracker.config import settings
from finance_tracker.domain.exceptions import LedgerAPIError
from finance_tracker.domain.models import Category, CategoryKind, LedgerSnapshot, RecurringTransaction, Transaction

ModelT = TypeVar("ModelT", bound=BaseModel)

_CATEGORY_PATHS = {
    CategoryKind.EXPENSE: "/expense-categories",
    CategoryKind.INCOME: "/income-categories",
}


def _encode(model: BaseModel, exclude: Optional[Set[str]] = None) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude=exclude)


def _decode(model: Type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise LedgerAPIError(f"Invalid {model.__name__} from ledger API: {e}") from e


class LedgerApiClient:
    """
    Client for a remote ledger service.

    Serves as the ledger source for ClientGateway (load_snapshot and
    save_processed_recurring), so recurring materialization can run on the
    client side against the server's atomic /recurring/process endpoint.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """
        Raises:
            LedgerAPIError: On timeout, network failure, HTTP errors, or invalid JSON
        """
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(method, path, json=payload)
                response.raise_for_status()
            except httpx.TimeoutException as e:
                raise LedgerAPIError(f"Ledger API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise LedgerAPIError(f"Ledger API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise LedgerAPIError(f"Ledger API unreachable: {e}") from e

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise LedgerAPIError(f"Invalid JSON from ledger API: {e}") from e

    async def load_snapshot(self) -> LedgerSnapshot:
        data = await self._request("GET", "/data")
        return _decode(LedgerDocument, data).to_snapshot()

    async def save_processed_recurring(
        self,
        transactions: List[Transaction],
        recurring: List[RecurringTransaction],
    ) -> None:
        payload = ProcessRecurringRequest(
            transactions=[TransactionSchema.from_domain(t) for t in transactions],
            recurring_transactions=[RecurringSchema.from_domain(r) for r in recurring],
        )
        await self._request("POST", "/recurring/process", _encode(payload))

    async def add_transaction(self, transaction: Transaction) -> Transaction:
        """Create a transaction; the server assigns the id"""
        payload = _encode(TransactionSchema.from_domain(transaction), exclude={"id"})
        return _decode(TransactionSchema, await self._request("POST", "/transactions", payload)).to_domain()

    async def update_transaction(self, transaction: Transaction) -> Transaction:
        payload = _encode(TransactionSchema.from_domain(transaction))
        data = await self._request("PUT", f"/transactions/{transaction.id}", payload)
        return _decode(TransactionSchema, data).to_domain()

    async def delete_transaction(self, transaction_id: str) -> None:
        await self._request("DELETE", f"/transactions/{transaction_id}")

    async def add_category(self, kind: CategoryKind, label: str) -> Category:
        data = await self._request("POST", _CATEGORY_PATHS[kind], _encode(CategoryLabel(label=label)))
        return _decode(CategorySchema, data).to_domain()

    async def update_category(self, kind: CategoryKind, value: str, label: str) -> Category:
        data = await self._request("PUT", f"{_CATEGORY_PATHS[kind]}/{value}", _encode(CategoryLabel(label=label)))
        return _decode(CategorySchema, data).to_domain()

    async def delete_category(self, kind: CategoryKind, value: str) -> None:
        await self._request("DELETE", f"{_CATEGORY_PATHS[kind]}/{value}")

    async def add_recurring(self, recurring: RecurringTransaction) -> RecurringTransaction:
        """Create a definition; the server assigns the id and starts with no cursor"""
        payload = _encode(RecurringSchema.from_domain(recurring), exclude={"id", "last_added_date"})
        return _decode(RecurringSchema, await self._request("POST", "/recurring", payload)).to_domain()

    async def update_recurring(self, recurring: RecurringTransaction) -> RecurringTransaction:
        payload = _encode(RecurringSchema.from_domain(recurring))
        data = await self._request("PUT", f"/recurring/{recurring.id}", payload)
        return _decode(RecurringSchema, data).to_domain()

    async def delete_recurring(self, recurring_id: str) -> None:
        await self._request("DELETE", f"/recurring/{recurring_id}")
