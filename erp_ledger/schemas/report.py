from decimal import Decimal
import datetime as dt
from typing import List, Optional
from pydantic import BaseModel

from erp_ledger.models.account import AccountType
from erp_ledger.schemas.journal import JournalEntryResponse


class AccountBalance(BaseModel):
    account_id: str
    code: str
    name: str
    type: AccountType
    total_debit: Decimal
    total_credit: Decimal
    balance: Decimal


class AccountLedgerLine(BaseModel):
    entry_id: str
    date: dt.date
    description: str
    reference_id: Optional[str] = None
    debit: Decimal
    credit: Decimal
    balance: Decimal


class AccountLedgerResponse(BaseModel):
    account_id: str
    code: str
    name: str
    type: AccountType
    lines: List[AccountLedgerLine]
    closing_balance: Decimal


class TrialBalanceRow(BaseModel):
    account_id: str
    code: str
    name: str
    type: AccountType
    debit: Decimal
    credit: Decimal


class TrialBalanceResponse(BaseModel):
    as_of: Optional[dt.date] = None
    rows: List[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    is_balanced: bool


class ProfitAndLossResponse(BaseModel):
    period: str
    start_date: dt.date
    revenue: Decimal
    cogs: Decimal
    gross_profit: Decimal
    other_expenses: Decimal
    net_profit: Decimal


class AgingRow(BaseModel):
    counterparty_id: str
    counterparty_name: str
    total_debt: Decimal
    unpaid_count: int
    oldest_date: dt.date


class DailyTrendPoint(BaseModel):
    date: dt.date
    revenue: Decimal
    expense: Decimal


class AccountingSummaryResponse(BaseModel):
    total_receivables: Decimal
    total_payables: Decimal
    month_revenue: Decimal
    month_expense: Decimal
    recent_entries: List[JournalEntryResponse]
    daily_trend: List[DailyTrendPoint]
