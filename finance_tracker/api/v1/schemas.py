"""Pydantic schemas for API request/response validation and the ledger document"""

from datetime import date
from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from finance_tracker.domain.models import (
    Category,
    Frequency,
    LedgerSnapshot,
    RecurringTransaction,
    Transaction,
    TransactionType,
)
from finance_tracker.utils.date_utils import is_iso_date


class CamelModel(BaseModel):
    """JSON bodies use camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_iso_date(value: str) -> str:
    if not is_iso_date(value):
        raise ValueError("must be a 'YYYY-MM-DD' date")
    return value


IsoDate = Annotated[str, AfterValidator(_check_iso_date)]


class TransactionCreate(CamelModel):
    """Request body for POST /v1/transactions"""

    description: str = ""
    amount: float = Field(..., gt=0, description="Positive amount")
    type: TransactionType
    date: IsoDate = Field(..., description="YYYY-MM-DD")
    expense_category: Optional[str] = None
    income_category: Optional[str] = None

    @model_validator(mode="after")
    def keep_matching_category(self):
        """Only the category field matching the type is kept"""
        if self.type == TransactionType.INCOME:
            self.expense_category = None
        else:
            self.income_category = None
        return self

    def to_domain(self, transaction_id: str) -> Transaction:
        return Transaction(
            id=transaction_id,
            description=self.description,
            amount=self.amount,
            type=self.type,
            date=self.date,
            expense_category=self.expense_category,
            income_category=self.income_category,
        )


class TransactionSchema(CamelModel):
    """Transaction as stored and returned"""

    id: str
    description: str = ""
    amount: float
    type: TransactionType
    date: str
    expense_category: Optional[str] = None
    income_category: Optional[str] = None

    @classmethod
    def from_domain(cls, t: Transaction) -> "TransactionSchema":
        return cls(
            id=t.id,
            description=t.description,
            amount=t.amount,
            type=t.type,
            date=t.date,
            expense_category=t.expense_category,
            income_category=t.income_category,
        )

    def to_domain(self) -> Transaction:
        return Transaction(
            id=self.id,
            description=self.description,
            amount=self.amount,
            type=self.type,
            date=self.date,
            expense_category=self.expense_category,
            income_category=self.income_category,
        )


class CategoryLabel(CamelModel):
    """Request body for creating or relabeling a category"""

    label: str = Field(..., min_length=1)


class CategorySchema(CamelModel):
    value: str
    label: str

    @classmethod
    def from_domain(cls, c: Category) -> "CategorySchema":
        return cls(value=c.value, label=c.label)

    def to_domain(self) -> Category:
        return Category(value=self.value, label=self.label)


class RecurringCreate(CamelModel):
    """Request body for POST/PUT /v1/recurring; the cursor is never client-controlled"""

    description: str = ""
    amount: float = Field(..., gt=0, description="Positive amount")
    type: TransactionType
    frequency: Frequency = Frequency.MONTHLY
    start_date: IsoDate = Field(..., description="YYYY-MM-DD of the first occurrence")
    expense_category: Optional[str] = None
    income_category: Optional[str] = None

    @model_validator(mode="after")
    def keep_matching_category(self):
        if self.type == TransactionType.INCOME:
            self.expense_category = None
        else:
            self.income_category = None
        return self

    def to_domain(self, recurring_id: str, last_added_date: Optional[str] = None) -> RecurringTransaction:
        return RecurringTransaction(
            id=recurring_id,
            description=self.description,
            amount=self.amount,
            type=self.type,
            frequency=self.frequency.value,
            start_date=self.start_date,
            last_added_date=last_added_date,
            expense_category=self.expense_category,
            income_category=self.income_category,
        )


class RecurringSchema(CamelModel):
    """
    Recurring definition as stored and returned.

    Fields are loosely typed so that stored definitions which would fail
    materialization can still be listed and fixed.
    """

    id: str
    description: str = ""
    amount: float
    type: str
    frequency: str = Frequency.MONTHLY.value
    start_date: Optional[str] = None
    last_added_date: Optional[str] = None
    expense_category: Optional[str] = None
    income_category: Optional[str] = None

    @classmethod
    def from_domain(cls, r: RecurringTransaction) -> "RecurringSchema":
        return cls(
            id=r.id,
            description=r.description,
            amount=r.amount,
            type=getattr(r.type, "value", r.type),
            frequency=getattr(r.frequency, "value", r.frequency),
            start_date=r.start_date,
            last_added_date=r.last_added_date,
            expense_category=r.expense_category,
            income_category=r.income_category,
        )

    def to_domain(self) -> RecurringTransaction:
        try:
            type_ = TransactionType(self.type)
        except ValueError:
            type_ = self.type
        return RecurringTransaction(
            id=self.id,
            description=self.description,
            amount=self.amount,
            type=type_,
            frequency=self.frequency,
            start_date=self.start_date,
            last_added_date=self.last_added_date,
            expense_category=self.expense_category,
            income_category=self.income_category,
        )


class ProcessRecurringRequest(CamelModel):
    """Request body for POST /v1/recurring/process"""

    transactions: List[TransactionSchema]
    recurring_transactions: List[RecurringSchema]


class ReplaceDataRequest(CamelModel):
    """Request body for POST /v1/replace-data"""

    transactions: List[TransactionSchema]
    expense_categories: List[CategorySchema]
    income_categories: List[CategorySchema]


class LedgerDocument(CamelModel):
    """
    The whole ledger as one JSON document.

    Used for GET /v1/data, the JSON-file store and the API client, so every
    surface shares one camelCase shape.
    """

    transactions: List[TransactionSchema] = Field(default_factory=list)
    expense_categories: List[CategorySchema] = Field(default_factory=list)
    income_categories: List[CategorySchema] = Field(default_factory=list)
    recurring_transactions: List[RecurringSchema] = Field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: LedgerSnapshot) -> "LedgerDocument":
        return cls(
            transactions=[TransactionSchema.from_domain(t) for t in snapshot.transactions],
            expense_categories=[CategorySchema.from_domain(c) for c in snapshot.expense_categories],
            income_categories=[CategorySchema.from_domain(c) for c in snapshot.income_categories],
            recurring_transactions=[RecurringSchema.from_domain(r) for r in snapshot.recurring],
        )

    def to_snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            transactions=[t.to_domain() for t in self.transactions],
            expense_categories=[c.to_domain() for c in self.expense_categories],
            income_categories=[c.to_domain() for c in self.income_categories],
            recurring=[r.to_domain() for r in self.recurring_transactions],
        )


class DataResponse(LedgerDocument):
    """Response for GET /v1/data"""


class SessionResponse(DataResponse):
    """Response for POST /v1/session"""

    added_count: int
    notice: Optional[str] = None


class UpcomingResponse(CamelModel):
    """Response for GET /v1/recurring/{id}/upcoming"""

    recurring_id: str
    dates: List[date]


class SummaryResponse(CamelModel):
    """Response for GET /v1/summary"""

    total_income: float
    total_expense: float
    balance: float
    expenses_by_category: Dict[str, float]
    income_by_category: Dict[str, float]
    transactions: List[TransactionSchema]
