"""Ledger store capability shared by every storage engine"""

import re
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import date
from typing import List, Optional, Tuple

from finance_tracker.domain.exceptions import PersistenceError
from finance_tracker.domain.models import (
    Category,
    CategoryKind,
    LedgerSnapshot,
    RecurringTransaction,
    Transaction,
)
from finance_tracker.domain.recurring import materialize
from finance_tracker.infrastructure.observability.metrics import persist_failures_counter


def new_category_value(label: str) -> str:
    """Stable key for a new category: slugged label plus a short random suffix"""
    slug = re.sub(r"\s+", "-", label.strip().lower())
    return f"{slug}-{uuid.uuid4().hex[:4]}"


class LedgerStore(ABC):
    """
    Persistence for one user's ledger.

    Engines are interchangeable. Every method is a single write from a reader's
    point of view; in particular atomic_replace_ledger_and_recurring never leaves
    new transactions without the matching cursors (or the reverse).

    Raises:
        PersistenceError: From any method when the engine cannot read or write
        NotFoundError: From upserts called with must_exist=True for a missing record
    """

    def __init__(self):
        # Guards every write and the read-modify-write in materialize_due
        self._lock = threading.RLock()

    @abstractmethod
    def load(self) -> LedgerSnapshot:
        """Return the full current document"""

    @abstractmethod
    def upsert_transaction(self, transaction: Transaction, must_exist: bool = False) -> Transaction:
        """Replace by id, or insert at the front of the ledger"""

    @abstractmethod
    def delete_transaction(self, transaction_id: str) -> None:
        """Remove by id; unknown ids are ignored"""

    @abstractmethod
    def upsert_category(self, kind: CategoryKind, category: Category, must_exist: bool = False) -> Category:
        """Replace by value, or append to the pool"""

    @abstractmethod
    def delete_category(self, kind: CategoryKind, value: str) -> None:
        """Remove from the pool and clear the reference from matching transactions"""

    @abstractmethod
    def upsert_recurring(self, recurring: RecurringTransaction, must_exist: bool = False) -> RecurringTransaction:
        """Replace by id, or append"""

    @abstractmethod
    def delete_recurring(self, recurring_id: str) -> None:
        """Remove by id; unknown ids are ignored"""

    @abstractmethod
    def atomic_replace_ledger_and_recurring(
        self,
        transactions: List[Transaction],
        recurring: List[RecurringTransaction],
    ) -> None:
        """Replace the ledger and the recurring definitions in one write"""

    @abstractmethod
    def replace_data(
        self,
        transactions: List[Transaction],
        expense_categories: List[Category],
        income_categories: List[Category],
    ) -> None:
        """Replace ledger and both category pools (dataset import); recurring is kept"""

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self.load().transactions if t.id == transaction_id), None)

    def get_recurring(self, recurring_id: str) -> Optional[RecurringTransaction]:
        return next((r for r in self.load().recurring if r.id == recurring_id), None)

    def materialize_due(self, today: date) -> Tuple[LedgerSnapshot, int]:
        """
        Load, materialize due recurring transactions and commit, as one step.

        Returns:
            The committed snapshot and how many transactions were added

        Raises:
            InvalidRecurringDefinitionError: A definition is malformed; nothing is written
            PersistenceError: Load or commit failed; the stored cursors are unchanged
        """
        with self._lock:
            snapshot = self.load()
            result = materialize(snapshot.transactions, snapshot.recurring, today)
            if result.added_count > 0:
                try:
                    self.atomic_replace_ledger_and_recurring(result.transactions, result.recurring)
                except PersistenceError:
                    persist_failures_counter.inc()
                    raise
        return replace(snapshot, transactions=result.transactions, recurring=result.recurring), result.added_count
