"""SQLAlchemy ORM models for the SQL ledger store"""

from sqlalchemy import Column, Float, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class TransactionRecord(Base):
    """Ledger transaction; position keeps the document order"""

    __tablename__ = "ledger_transaction"

    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    amount = Column(Float, nullable=False)
    type = Column(String(16), nullable=False)
    date = Column(String(10), nullable=False, index=True)  # 'YYYY-MM-DD'
    expense_category = Column(Text, nullable=True)
    income_category = Column(Text, nullable=True)


class CategoryRecord(Base):
    """Category within the expense or income pool"""

    __tablename__ = "ledger_category"

    kind = Column(String(16), primary_key=True)  # expense | income
    value = Column(Text, primary_key=True)
    label = Column(Text, nullable=False)
    position = Column(Integer, nullable=False)


class RecurringRecord(Base):
    """Recurring definition with its materialization cursor"""

    __tablename__ = "recurring_transaction"

    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False)
    description = Column(Text, nullable=False, default="")
    amount = Column(Float, nullable=False)
    type = Column(String(16), nullable=False)
    frequency = Column(String(32), nullable=False, default="monthly")
    # Stored verbatim; validated when materializing
    start_date = Column(Text, nullable=True)
    last_added_date = Column(Text, nullable=True)
    expense_category = Column(Text, nullable=True)
    income_category = Column(Text, nullable=True)
