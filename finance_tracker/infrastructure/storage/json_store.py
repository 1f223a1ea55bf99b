"""Ledger store backed by a single JSON document on disk"""

import json
import logging
import os
from pathlib import Path
from typing import Callable, List, Union

from pydantic import ValidationError

from finance_tracker.api.v1.schemas import LedgerDocument
from finance_tracker.domain.exceptions import NotFoundError, PersistenceError
from finance_tracker.domain.models import (
    Category,
    CategoryKind,
    LedgerSnapshot,
    RecurringTransaction,
    Transaction,
    default_snapshot,
)
from finance_tracker.infrastructure.storage.base import LedgerStore

logger = logging.getLogger(__name__)


class JsonLedgerStore(LedgerStore):
    """
    Whole-document store: every operation reads the file, edits the snapshot and
    writes it back through a temporary file plus os.replace(), so readers see
    either the old or the new document and never a partial one.
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)

    def load(self) -> LedgerSnapshot:
        with self._lock:
            return self._read()

    def upsert_transaction(self, transaction: Transaction, must_exist: bool = False) -> Transaction:
        def apply(snapshot: LedgerSnapshot) -> None:
            for i, existing in enumerate(snapshot.transactions):
                if existing.id == transaction.id:
                    snapshot.transactions[i] = transaction
                    return
            if must_exist:
                raise NotFoundError(f"Transaction {transaction.id} not found")
            snapshot.transactions.insert(0, transaction)

        self._modify(apply)
        return transaction

    def delete_transaction(self, transaction_id: str) -> None:
        def apply(snapshot: LedgerSnapshot) -> None:
            snapshot.transactions = [t for t in snapshot.transactions if t.id != transaction_id]

        self._modify(apply)

    def upsert_category(self, kind: CategoryKind, category: Category, must_exist: bool = False) -> Category:
        def apply(snapshot: LedgerSnapshot) -> None:
            pool = snapshot.categories(kind)
            for i, existing in enumerate(pool):
                if existing.value == category.value:
                    pool[i] = category
                    return
            if must_exist:
                raise NotFoundError(f"{kind.value.capitalize()} category {category.value} not found")
            pool.append(category)

        self._modify(apply)
        return category

    def delete_category(self, kind: CategoryKind, value: str) -> None:
        def apply(snapshot: LedgerSnapshot) -> None:
            if kind == CategoryKind.INCOME:
                snapshot.income_categories = [c for c in snapshot.income_categories if c.value != value]
                for t in snapshot.transactions:
                    if t.income_category == value:
                        t.income_category = None
            else:
                snapshot.expense_categories = [c for c in snapshot.expense_categories if c.value != value]
                for t in snapshot.transactions:
                    if t.expense_category == value:
                        t.expense_category = None

        self._modify(apply)

    def upsert_recurring(self, recurring: RecurringTransaction, must_exist: bool = False) -> RecurringTransaction:
        def apply(snapshot: LedgerSnapshot) -> None:
            for i, existing in enumerate(snapshot.recurring):
                if existing.id == recurring.id:
                    snapshot.recurring[i] = recurring
                    return
            if must_exist:
                raise NotFoundError(f"Recurring transaction {recurring.id} not found")
            snapshot.recurring.append(recurring)

        self._modify(apply)
        return recurring

    def delete_recurring(self, recurring_id: str) -> None:
        def apply(snapshot: LedgerSnapshot) -> None:
            snapshot.recurring = [r for r in snapshot.recurring if r.id != recurring_id]

        self._modify(apply)

    def atomic_replace_ledger_and_recurring(
        self,
        transactions: List[Transaction],
        recurring: List[RecurringTransaction],
    ) -> None:
        def apply(snapshot: LedgerSnapshot) -> None:
            snapshot.transactions = list(transactions)
            snapshot.recurring = list(recurring)

        self._modify(apply)

    def replace_data(
        self,
        transactions: List[Transaction],
        expense_categories: List[Category],
        income_categories: List[Category],
    ) -> None:
        def apply(snapshot: LedgerSnapshot) -> None:
            snapshot.transactions = list(transactions)
            snapshot.expense_categories = list(expense_categories)
            snapshot.income_categories = list(income_categories)

        self._modify(apply)

    def _modify(self, apply: Callable[[LedgerSnapshot], None]) -> None:
        with self._lock:
            snapshot = self._read()
            apply(snapshot)
            self._write(snapshot)

    def _read(self) -> LedgerSnapshot:
        if not self.path.exists():
            return default_snapshot()
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Cannot read ledger file {self.path}: {e}") from e
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ledger file is not valid JSON, starting from defaults", extra={"path": str(self.path)})
            return default_snapshot()
        try:
            return LedgerDocument.model_validate(data).to_snapshot()
        except ValidationError as e:
            raise PersistenceError(f"Ledger file {self.path} has malformed records: {e}") from e

    def _write(self, snapshot: LedgerSnapshot) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(LedgerDocument.from_snapshot(snapshot).model_dump_json(by_alias=True, indent=2))
            os.replace(tmp, self.path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise PersistenceError(f"Cannot write ledger file {self.path}: {e}") from e
