"""Session start-up: load the ledger, materialize due recurring transactions, persist"""

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import List, Optional, Protocol, Tuple, Union

from finance_tracker.domain.exceptions import (
    InvalidRecurringDefinitionError,
    LedgerAPIError,
    LedgerLoadError,
    PersistenceError,
)
from finance_tracker.domain.models import Category, LedgerSnapshot, RecurringTransaction, Transaction
from finance_tracker.domain.recurring import materialize
from finance_tracker.infrastructure.observability.logging import log_materialization
from finance_tracker.infrastructure.observability.metrics import persist_failures_counter, record_session_start
from finance_tracker.infrastructure.storage.base import LedgerStore
from finance_tracker.utils import date_utils


class LedgerGateway(Protocol):
    """Runs one materialization pass against wherever the ledger lives"""

    async def materialize_due(self, today: date) -> Tuple[LedgerSnapshot, int]:
        ...


class LedgerSource(Protocol):
    """Remote ledger that can be read whole and committed whole (see LedgerApiClient)"""

    async def load_snapshot(self) -> LedgerSnapshot:
        ...

    async def save_processed_recurring(
        self,
        transactions: List[Transaction],
        recurring: List[RecurringTransaction],
    ) -> None:
        ...


class StoreGateway:
    """In-process gateway; the store loads, materializes and commits under its own lock"""

    def __init__(self, store: LedgerStore):
        self.store = store

    async def materialize_due(self, today: date) -> Tuple[LedgerSnapshot, int]:
        return await asyncio.to_thread(self.store.materialize_due, today)


class ClientGateway:
    """
    Client-side materialization against a remote ledger.

    The commit replaces the remote ledger and definitions wholesale, so it must
    not overlap other writers to the same ledger.
    """

    def __init__(self, source: LedgerSource):
        self.source = source

    async def materialize_due(self, today: date) -> Tuple[LedgerSnapshot, int]:
        snapshot = await self.source.load_snapshot()
        result = materialize(snapshot.transactions, snapshot.recurring, today)
        if result.added_count > 0:
            try:
                await self.source.save_processed_recurring(result.transactions, result.recurring)
            except (PersistenceError, LedgerAPIError):
                persist_failures_counter.inc()
                raise
        return replace(snapshot, transactions=result.transactions, recurring=result.recurring), result.added_count


@dataclass
class SessionState:
    """Committed ledger state handed to the rest of the application"""

    transactions: List[Transaction] = field(default_factory=list)
    expense_categories: List[Category] = field(default_factory=list)
    income_categories: List[Category] = field(default_factory=list)
    recurring: List[RecurringTransaction] = field(default_factory=list)
    added_count: int = 0

    @property
    def notice(self) -> Optional[str]:
        """User-facing message when recurring transactions were added"""
        if self.added_count == 0:
            return None
        noun = "transaction" if self.added_count == 1 else "transactions"
        return f"{self.added_count} recurring {noun} added automatically."


async def start_session(
    gateway: LedgerGateway,
    today: Optional[Union[date, datetime]] = None,
    request_id: str = "startup",
) -> SessionState:
    """
    Run the once-per-session reconciliation of recurring definitions.

    Flow:
    1. Load the full ledger and recurring definitions
    2. Materialize every occurrence due on or before today
    3. If anything was generated, persist ledger + cursors in one atomic write
    4. Return the committed state

    Steps 1-3 run inside the gateway as one unit.

    A single malformed definition aborts the whole start-up; nothing is written.

    Raises:
        InvalidRecurringDefinitionError: A definition has malformed dates or values
        LedgerLoadError: Loading or persisting failed; retrying later recomputes
            from the last committed cursors
    """
    start_time = time.time()
    ref = date_utils.to_date(today or date_utils.today())

    try:
        snapshot, added_count = await gateway.materialize_due(ref)
    except InvalidRecurringDefinitionError as e:
        record_session_start("invalid_definition")
        logging.error(f"Recurring definition rejected: {e}", extra={"request_id": request_id})
        raise
    except (PersistenceError, LedgerAPIError) as e:
        record_session_start("storage_failed")
        logging.error(f"Session start-up could not load or save the ledger: {e}", extra={"request_id": request_id})
        raise LedgerLoadError("Could not load or save the ledger. Please try again.") from e

    record_session_start("ok", added_count)
    duration_ms = (time.time() - start_time) * 1000
    log_materialization(request_id, added_count, len(snapshot.recurring), duration_ms)

    return SessionState(
        transactions=snapshot.transactions,
        expense_categories=snapshot.expense_categories,
        income_categories=snapshot.income_categories,
        recurring=snapshot.recurring,
        added_count=added_count,
    )
