"""Domain models - pure Python dataclasses representing ledger entities"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Frequency(str, Enum):
    MONTHLY = "monthly"


class CategoryKind(str, Enum):
    """Which of the two disjoint category pools a category belongs to"""

    EXPENSE = "expense"
    INCOME = "income"


@dataclass
class Transaction:
    """A single income or expense entry in the ledger"""

    id: str
    description: str
    amount: float
    type: TransactionType
    date: str  # 'YYYY-MM-DD'
    expense_category: Optional[str] = None
    income_category: Optional[str] = None

    @property
    def category(self) -> Optional[str]:
        """Category reference matching the transaction type"""
        if self.type == TransactionType.INCOME:
            return self.income_category
        return self.expense_category


@dataclass
class Category:
    value: str  # stable key referenced by transactions
    label: str


@dataclass
class RecurringTransaction:
    """Template that generates one transaction per period"""

    id: str
    description: str
    amount: float
    type: TransactionType
    frequency: str  # Frequency value; unknown strings are kept as loaded
    start_date: str  # 'YYYY-MM-DD'
    last_added_date: Optional[str] = None  # cursor, advanced only by materialization
    expense_category: Optional[str] = None
    income_category: Optional[str] = None


@dataclass
class LedgerSnapshot:
    """The full persisted document"""

    transactions: List[Transaction] = field(default_factory=list)
    expense_categories: List[Category] = field(default_factory=list)
    income_categories: List[Category] = field(default_factory=list)
    recurring: List[RecurringTransaction] = field(default_factory=list)

    def categories(self, kind: CategoryKind) -> List[Category]:
        if kind == CategoryKind.INCOME:
            return self.income_categories
        return self.expense_categories


@dataclass
class MaterializationResult:
    """Output of a materialization pass"""

    transactions: List[Transaction]
    recurring: List[RecurringTransaction]
    added_count: int


DEFAULT_EXPENSE_CATEGORIES = [
    ("food", "Food"),
    ("transport", "Transport"),
    ("entertainment", "Entertainment"),
    ("bills", "Bills"),
    ("other", "Other"),
]

DEFAULT_INCOME_CATEGORIES = [
    ("salary", "Salary"),
    ("freelance", "Freelance"),
    ("gift", "Gift"),
    ("other", "Other"),
]


def default_snapshot() -> LedgerSnapshot:
    """Empty ledger seeded with the default category pools"""
    return LedgerSnapshot(
        expense_categories=[Category(value=v, label=l) for v, l in DEFAULT_EXPENSE_CATEGORIES],
        income_categories=[Category(value=v, label=l) for v, l in DEFAULT_INCOME_CATEGORIES],
    )
