import enum
from sqlalchemy import Boolean, Column, Date, DateTime, Enum, String
from sqlalchemy.sql import func
from erp_ledger.core.database import Base


class AccountType(str, enum.Enum):
    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    REVENUE = "Revenue"
    EXPENSE = "Expense"

    @property
    def is_debit_normal(self) -> bool:
        """Asset and Expense balances grow with debits; the rest grow with credits."""
        return self in (AccountType.ASSET, AccountType.EXPENSE)


class PeriodStatus(str, enum.Enum):
    OPEN = "Open"
    CLOSED = "Closed"


class Account(Base):
    """Chart-of-accounts entry. Codes are referenced by convention (111 Cash, 511 Revenue, ...)."""

    __tablename__ = "accounts"

    id = Column(String(20), primary_key=True)
    code = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(150), nullable=False)
    type = Column(Enum(AccountType), nullable=False)
    is_system_account = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class AccountingPeriod(Base):
    __tablename__ = "accounting_periods"

    id = Column(String(20), primary_key=True)
    name = Column(String(100), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(Enum(PeriodStatus), nullable=False, default=PeriodStatus.OPEN)
