"""
Read-only ledger reports: account balances, account ledger, trial balance,
profit and loss, receivables/payables aging and the dashboard summary.
Nothing here writes or commits.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from erp_ledger.common.exceptions import NotFoundError, ValidationFailure
from erp_ledger.logger_config import logger
from erp_ledger.models.account import Account, AccountType
from erp_ledger.models.journal import JournalEntry, JournalEntryLine
from erp_ledger.models.payment import PaymentStatus
from erp_ledger.models.purchase import PurchaseOrder, PurchaseOrderStatus
from erp_ledger.models.sales import Order, OrderStatus
from erp_ledger.services import account_service
from erp_ledger.utils.amounts import ZERO, money

PERIODS = ("month", "quarter")


def signed_balance(account_type: AccountType, debit, credit) -> Decimal:
    """Balance in the account's normal direction."""
    debit, credit = money(debit), money(credit)
    return debit - credit if account_type.is_debit_normal else credit - debit


def _line_sums(db: Session, as_of: Optional[date] = None, since: Optional[date] = None) -> Dict[str, tuple]:
    query = (
        db.query(
            JournalEntryLine.account_id,
            func.coalesce(func.sum(JournalEntryLine.debit), 0),
            func.coalesce(func.sum(JournalEntryLine.credit), 0),
        )
        .join(JournalEntry, JournalEntryLine.journal_entry_id == JournalEntry.id)
    )
    if as_of:
        query = query.filter(JournalEntry.date <= as_of)
    if since:
        query = query.filter(JournalEntry.date >= since)

    rows = query.group_by(JournalEntryLine.account_id).all()
    return {account_id: (money(d), money(c)) for account_id, d, c in rows}


# ================= BALANCES ===================

def get_account_balances(db: Session, as_of: Optional[date] = None) -> List[dict]:
    sums = _line_sums(db, as_of=as_of)
    balances = []
    for account in db.query(Account).order_by(Account.code).all():
        total_debit, total_credit = sums.get(account.id, (ZERO, ZERO))
        balances.append({
            "account_id": account.id,
            "code": account.code,
            "name": account.name,
            "type": account.type,
            "total_debit": total_debit,
            "total_credit": total_credit,
            "balance": signed_balance(account.type, total_debit, total_credit),
        })
    return balances


def get_account_ledger(db: Session, account_id: str) -> dict:
    """Every line posted to an account in posting order, with a running balance."""
    account = account_service.get_account_by_id(db, account_id)
    if not account:
        raise NotFoundError(f"Account {account_id} not found")

    rows = (
        db.query(JournalEntryLine, JournalEntry)
        .join(JournalEntry, JournalEntryLine.journal_entry_id == JournalEntry.id)
        .filter(JournalEntryLine.account_id == account_id)
        .order_by(JournalEntry.date, JournalEntry.seq, JournalEntryLine.id)
        .all()
    )

    running = ZERO
    lines = []
    for line, entry in rows:
        running += signed_balance(account.type, line.debit, line.credit)
        lines.append({
            "entry_id": entry.id,
            "date": entry.date,
            "description": entry.description,
            "reference_id": entry.reference_id,
            "debit": money(line.debit),
            "credit": money(line.credit),
            "balance": running,
        })

    return {
        "account_id": account.id,
        "code": account.code,
        "name": account.name,
        "type": account.type,
        "lines": lines,
        "closing_balance": running,
    }


def get_trial_balance(db: Session, as_of: Optional[date] = None) -> dict:
    """
    One row per account: a positive normal balance sits on the normal side,
    a negative one flips to the other column.
    """
    rows = []
    total_debit = ZERO
    total_credit = ZERO

    for item in get_account_balances(db, as_of=as_of):
        balance = item["balance"]
        debit_side = item["type"].is_debit_normal
        if balance < 0:
            debit_side = not debit_side
        debit = abs(balance) if debit_side else ZERO
        credit = abs(balance) if not debit_side else ZERO

        total_debit += debit
        total_credit += credit
        rows.append({
            "account_id": item["account_id"],
            "code": item["code"],
            "name": item["name"],
            "type": item["type"],
            "debit": debit,
            "credit": credit,
        })

    if total_debit != total_credit:
        logger.error(f"Trial balance out of balance: {total_debit} != {total_credit}")

    return {
        "as_of": as_of,
        "rows": rows,
        "total_debit": total_debit,
        "total_credit": total_credit,
        "is_balanced": total_debit == total_credit,
    }


# ================= PROFIT AND LOSS ===================

def period_start(period: str, today: date) -> date:
    if period == "month":
        return today.replace(day=1)
    if period == "quarter":
        return date(today.year, 3 * ((today.month - 1) // 3) + 1, 1)
    raise ValidationFailure(f"Unknown period {period}; expected one of {', '.join(PERIODS)}")


def get_profit_and_loss(db: Session, period: str = "month", today: Optional[date] = None) -> dict:
    """
    Entries dated on or after the first day of the current month/quarter.
    Revenue = credits to Revenue accounts, COGS = debits to 632, other
    expenses = debits to the remaining Expense accounts.
    """
    today = today or date.today()
    start = period_start(period, today)

    rows = (
        db.query(
            Account.code,
            Account.type,
            func.coalesce(func.sum(JournalEntryLine.debit), 0),
            func.coalesce(func.sum(JournalEntryLine.credit), 0),
        )
        .join(JournalEntryLine, JournalEntryLine.account_id == Account.id)
        .join(JournalEntry, JournalEntryLine.journal_entry_id == JournalEntry.id)
        .filter(JournalEntry.date >= start)
        .filter(Account.type.in_([AccountType.REVENUE, AccountType.EXPENSE]))
        .group_by(Account.code, Account.type)
        .all()
    )

    revenue = ZERO
    cogs = ZERO
    other_expenses = ZERO
    for code, account_type, debit, credit in rows:
        if account_type == AccountType.REVENUE:
            revenue += money(credit)
        elif code == account_service.COST_OF_GOODS_SOLD:
            cogs += money(debit)
        else:
            other_expenses += money(debit)

    gross_profit = revenue - cogs
    return {
        "period": period,
        "start_date": start,
        "revenue": revenue,
        "cogs": cogs,
        "gross_profit": gross_profit,
        "other_expenses": other_expenses,
        "net_profit": gross_profit - other_expenses,
    }


# ================= AGING ===================

def _aging(documents, counterparty_id, counterparty_name, doc_date) -> List[dict]:
    groups: Dict[str, dict] = {}
    for doc in documents:
        debt = money(doc.total) - money(doc.amount_paid)
        if debt <= 0:
            continue
        key = counterparty_id(doc)
        group = groups.setdefault(key, {
            "counterparty_id": key,
            "counterparty_name": counterparty_name(doc),
            "total_debt": ZERO,
            "unpaid_count": 0,
            "oldest_date": doc_date(doc),
        })
        group["total_debt"] += debt
        group["unpaid_count"] += 1
        group["oldest_date"] = min(group["oldest_date"], doc_date(doc))

    return sorted(groups.values(), key=lambda g: g["total_debt"], reverse=True)


def get_receivables_aging(db: Session) -> List[dict]:
    orders = (
        db.query(Order)
        .filter(Order.status == OrderStatus.COMPLETED)
        .filter(Order.payment_status != PaymentStatus.PAID)
        .all()
    )
    return _aging(orders, lambda o: o.customer_id, lambda o: o.customer_name, lambda o: o.date)


def get_payables_aging(db: Session) -> List[dict]:
    purchase_orders = (
        db.query(PurchaseOrder)
        .filter(PurchaseOrder.status == PurchaseOrderStatus.RECEIVED)
        .filter(PurchaseOrder.payment_status != PaymentStatus.PAID)
        .all()
    )
    return _aging(
        purchase_orders,
        lambda po: po.supplier_id,
        lambda po: po.supplier_name,
        lambda po: po.received_date or po.order_date,
    )


# ================= DASHBOARD ===================

def _revenue_expense_by_day(db: Session, since: date) -> Dict[date, Dict[str, Decimal]]:
    rows = (
        db.query(
            JournalEntry.date,
            Account.type,
            func.coalesce(func.sum(JournalEntryLine.debit), 0),
            func.coalesce(func.sum(JournalEntryLine.credit), 0),
        )
        .join(JournalEntryLine, JournalEntryLine.journal_entry_id == JournalEntry.id)
        .join(Account, JournalEntryLine.account_id == Account.id)
        .filter(JournalEntry.date >= since)
        .filter(Account.type.in_([AccountType.REVENUE, AccountType.EXPENSE]))
        .group_by(JournalEntry.date, Account.type)
        .all()
    )

    by_day: Dict[date, Dict[str, Decimal]] = {}
    for day, account_type, debit, credit in rows:
        bucket = by_day.setdefault(day, {"revenue": ZERO, "expense": ZERO})
        if account_type == AccountType.REVENUE:
            bucket["revenue"] += money(credit)
        else:
            bucket["expense"] += money(debit)
    return by_day


def get_accounting_summary(db: Session, today: Optional[date] = None) -> dict:
    today = today or date.today()
    balances = {item["code"]: item["balance"] for item in get_account_balances(db)}

    month_start = today.replace(day=1)
    month = _revenue_expense_by_day(db, month_start)

    window_start = today - timedelta(days=29)
    daily = _revenue_expense_by_day(db, window_start)
    trend = []
    for offset in range(30):
        day = window_start + timedelta(days=offset)
        bucket = daily.get(day, {"revenue": ZERO, "expense": ZERO})
        trend.append({"date": day, "revenue": bucket["revenue"], "expense": bucket["expense"]})

    recent = (
        db.query(JournalEntry)
        .order_by(JournalEntry.date.desc(), JournalEntry.seq.desc())
        .limit(5)
        .all()
    )

    return {
        "total_receivables": balances.get(account_service.ACCOUNTS_RECEIVABLE, ZERO),
        "total_payables": balances.get(account_service.ACCOUNTS_PAYABLE, ZERO),
        "month_revenue": sum((b["revenue"] for b in month.values()), ZERO),
        "month_expense": sum((b["expense"] for b in month.values()), ZERO),
        "recent_entries": recent,
        "daily_trend": trend,
    }
