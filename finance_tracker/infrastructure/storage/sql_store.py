"""Ledger store backed by SQLAlchemy tables"""

import logging
from contextlib import contextmanager
from typing import Iterator, List

from sqlalchemy import func, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_tracker.api.v1.schemas import RecurringSchema, TransactionSchema
from finance_tracker.domain.exceptions import NotFoundError, PersistenceError
from finance_tracker.domain.models import (
    Category,
    CategoryKind,
    LedgerSnapshot,
    RecurringTransaction,
    Transaction,
    TransactionType,
    default_snapshot,
)
from finance_tracker.infrastructure.database.models import Base, CategoryRecord, RecurringRecord, TransactionRecord
from finance_tracker.infrastructure.database.session import build_session_factory, session_scope
from finance_tracker.infrastructure.storage.base import LedgerStore

logger = logging.getLogger(__name__)


def _to_transaction(row: TransactionRecord) -> Transaction:
    return Transaction(
        id=row.id,
        description=row.description,
        amount=row.amount,
        type=TransactionType(row.type),
        date=row.date,
        expense_category=row.expense_category,
        income_category=row.income_category,
    )


def _to_recurring(row: RecurringRecord) -> RecurringTransaction:
    # Stored type and frequency are kept as loaded; the materializer rejects bad ones
    return RecurringSchema(
        id=row.id,
        description=row.description,
        amount=row.amount,
        type=row.type,
        frequency=row.frequency,
        start_date=row.start_date,
        last_added_date=row.last_added_date,
        expense_category=row.expense_category,
        income_category=row.income_category,
    ).to_domain()


def _fill_transaction(row: TransactionRecord, t: Transaction) -> None:
    for column, value in TransactionSchema.from_domain(t).model_dump(mode="json", exclude={"id"}).items():
        setattr(row, column, value)


def _fill_recurring(row: RecurringRecord, r: RecurringTransaction) -> None:
    for column, value in RecurringSchema.from_domain(r).model_dump(mode="json", exclude={"id"}).items():
        setattr(row, column, value)


def _new_transaction_row(t: Transaction, position: int) -> TransactionRecord:
    row = TransactionRecord(id=t.id, position=position)
    _fill_transaction(row, t)
    return row


def _new_recurring_row(r: RecurringTransaction, position: int) -> RecurringRecord:
    row = RecurringRecord(id=r.id, position=position)
    _fill_recurring(row, r)
    return row


def _replace_categories(db: Session, kind: CategoryKind, categories: List[Category]) -> None:
    db.query(CategoryRecord).filter(CategoryRecord.kind == kind.value).delete(synchronize_session=False)
    for i, c in enumerate(categories):
        db.add(CategoryRecord(kind=kind.value, value=c.value, label=c.label, position=i))


class SqlLedgerStore(LedgerStore):
    """
    Relational store. Each method is one session transaction, so the atomic
    replace commits the new ledger and the advanced cursors together or not at all.
    """

    def __init__(self, engine: Engine):
        super().__init__()
        self.engine = engine
        self._session_factory = build_session_factory(engine)
        self._initialize()

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        """One committed session under the store lock; database errors become PersistenceError"""
        with self._lock:
            try:
                with session_scope(self._session_factory) as db:
                    yield db
            except SQLAlchemyError as e:
                raise PersistenceError(f"Cannot {action}: {e}") from e

    def _initialize(self) -> None:
        """Create tables; seed default categories only for a brand-new database"""
        try:
            is_new = not inspect(self.engine).has_table(CategoryRecord.__tablename__)
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Cannot initialize ledger database: {e}") from e

        if is_new:
            seed = default_snapshot()
            with self._transaction("seed default categories") as db:
                _replace_categories(db, CategoryKind.EXPENSE, seed.expense_categories)
                _replace_categories(db, CategoryKind.INCOME, seed.income_categories)
            logger.info("Initialized ledger database", extra={"url": str(self.engine.url)})

    def load(self) -> LedgerSnapshot:
        with self._transaction("load ledger") as db:
            categories = db.query(CategoryRecord).order_by(CategoryRecord.position).all()
            return LedgerSnapshot(
                transactions=[
                    _to_transaction(row)
                    for row in db.query(TransactionRecord).order_by(TransactionRecord.position).all()
                ],
                expense_categories=[
                    Category(value=c.value, label=c.label) for c in categories if c.kind == CategoryKind.EXPENSE.value
                ],
                income_categories=[
                    Category(value=c.value, label=c.label) for c in categories if c.kind == CategoryKind.INCOME.value
                ],
                recurring=[
                    _to_recurring(row)
                    for row in db.query(RecurringRecord).order_by(RecurringRecord.position).all()
                ],
            )

    def upsert_transaction(self, transaction: Transaction, must_exist: bool = False) -> Transaction:
        with self._transaction("save transaction") as db:
            row = db.get(TransactionRecord, transaction.id)
            if row is not None:
                _fill_transaction(row, transaction)
            elif must_exist:
                raise NotFoundError(f"Transaction {transaction.id} not found")
            else:
                first = db.query(func.min(TransactionRecord.position)).scalar()
                db.add(_new_transaction_row(transaction, (first if first is not None else 0) - 1))
        return transaction

    def delete_transaction(self, transaction_id: str) -> None:
        with self._transaction("delete transaction") as db:
            db.query(TransactionRecord).filter(TransactionRecord.id == transaction_id).delete()

    def upsert_category(self, kind: CategoryKind, category: Category, must_exist: bool = False) -> Category:
        with self._transaction("save category") as db:
            row = db.get(CategoryRecord, (kind.value, category.value))
            if row is not None:
                row.label = category.label
            elif must_exist:
                raise NotFoundError(f"{kind.value.capitalize()} category {category.value} not found")
            else:
                last = (
                    db.query(func.max(CategoryRecord.position))
                    .filter(CategoryRecord.kind == kind.value)
                    .scalar()
                )
                db.add(
                    CategoryRecord(
                        kind=kind.value,
                        value=category.value,
                        label=category.label,
                        position=(last if last is not None else -1) + 1,
                    )
                )
        return category

    def delete_category(self, kind: CategoryKind, value: str) -> None:
        column = TransactionRecord.income_category if kind == CategoryKind.INCOME else TransactionRecord.expense_category
        with self._transaction("delete category") as db:
            db.query(CategoryRecord).filter(
                CategoryRecord.kind == kind.value, CategoryRecord.value == value
            ).delete(synchronize_session=False)
            db.query(TransactionRecord).filter(column == value).update(
                {column: None}, synchronize_session=False
            )

    def upsert_recurring(self, recurring: RecurringTransaction, must_exist: bool = False) -> RecurringTransaction:
        with self._transaction("save recurring transaction") as db:
            row = db.get(RecurringRecord, recurring.id)
            if row is not None:
                _fill_recurring(row, recurring)
            elif must_exist:
                raise NotFoundError(f"Recurring transaction {recurring.id} not found")
            else:
                last = db.query(func.max(RecurringRecord.position)).scalar()
                db.add(_new_recurring_row(recurring, (last if last is not None else -1) + 1))
        return recurring

    def delete_recurring(self, recurring_id: str) -> None:
        with self._transaction("delete recurring transaction") as db:
            db.query(RecurringRecord).filter(RecurringRecord.id == recurring_id).delete()

    def atomic_replace_ledger_and_recurring(
        self,
        transactions: List[Transaction],
        recurring: List[RecurringTransaction],
    ) -> None:
        with self._transaction("replace ledger and recurring definitions") as db:
            db.query(TransactionRecord).delete(synchronize_session=False)
            db.query(RecurringRecord).delete(synchronize_session=False)
            db.add_all(_new_transaction_row(t, i) for i, t in enumerate(transactions))
            db.add_all(_new_recurring_row(r, i) for i, r in enumerate(recurring))

    def replace_data(
        self,
        transactions: List[Transaction],
        expense_categories: List[Category],
        income_categories: List[Category],
    ) -> None:
        with self._transaction("replace ledger data") as db:
            db.query(TransactionRecord).delete(synchronize_session=False)
            db.add_all(_new_transaction_row(t, i) for i, t in enumerate(transactions))
            _replace_categories(db, CategoryKind.EXPENSE, expense_categories)
            _replace_categories(db, CategoryKind.INCOME, income_categories)
