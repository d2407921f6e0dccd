from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_, func
from typing import Optional, List
from datetime import date

from erp_ledger.common.exceptions import AlreadyProcessedError, NotFoundError, ValidationFailure
from erp_ledger.models.account import Account, AccountType, AccountingPeriod, PeriodStatus
from erp_ledger.models.journal import JournalEntryLine

from erp_ledger.logger_config import logger

# Account codes the event processors post to
CASH = "111"
BANK = "112"
ACCOUNTS_RECEIVABLE = "131"
VAT_RECEIVABLE = "133"
INVENTORY = "156"
ACCOUNTS_PAYABLE = "331"
VAT_PAYABLE = "3331"
SALES_REVENUE = "511"
COST_OF_GOODS_SOLD = "632"

SYSTEM_ACCOUNT_CODES = (
    CASH, BANK, ACCOUNTS_RECEIVABLE, VAT_RECEIVABLE, INVENTORY,
    ACCOUNTS_PAYABLE, VAT_PAYABLE, SALES_REVENUE, COST_OF_GOODS_SOLD,
)

DEFAULT_CHART_OF_ACCOUNTS = [
    ("111", "Cash", AccountType.ASSET),
    ("112", "Bank deposits", AccountType.ASSET),
    ("131", "Accounts receivable", AccountType.ASSET),
    ("133", "VAT receivable", AccountType.ASSET),
    ("156", "Inventory", AccountType.ASSET),
    ("331", "Accounts payable", AccountType.LIABILITY),
    ("3331", "VAT payable", AccountType.LIABILITY),
    ("411", "Owner's equity", AccountType.EQUITY),
    ("511", "Sales revenue", AccountType.REVENUE),
    ("515", "Financial income", AccountType.REVENUE),
    ("632", "Cost of goods sold", AccountType.EXPENSE),
    ("642", "Administrative expenses", AccountType.EXPENSE),
    ("6421", "Rent expense", AccountType.EXPENSE),
]


def seed_chart_of_accounts(db: Session) -> int:
    """Insert the default chart of accounts. Existing codes are left alone."""
    existing = {code for (code,) in db.query(Account.code).all()}
    created = 0
    for code, name, account_type in DEFAULT_CHART_OF_ACCOUNTS:
        if code in existing:
            continue
        db.add(Account(
            id=code,
            code=code,
            name=name,
            type=account_type,
            is_system_account=code in SYSTEM_ACCOUNT_CODES,
        ))
        created += 1
    db.flush()
    if created:
        logger.info(f"Seeded {created} accounts into the chart of accounts")
    return created


# ==================== QUERY OPERATIONS ====================

def get_account_by_id(db: Session, account_id: str) -> Optional[Account]:
    return db.query(Account).filter(Account.id == account_id).first()


def get_account_by_code(db: Session, code: str) -> Optional[Account]:
    return db.query(Account).filter(Account.code == code).first()


def require_account_by_code(db: Session, code: str) -> Account:
    """Resolve an account the processors post to; a missing one is a setup error."""
    account = get_account_by_code(db, code)
    if not account:
        logger.error(f"Account {code} is missing from the chart of accounts")
        raise NotFoundError(f"Account {code} is missing from the chart of accounts")
    return account


def get_all_accounts(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    type: Optional[AccountType] = None,
) -> tuple[List[Account], int]:
    """Get the chart of accounts ordered by code, with optional filteration."""
    query = db.query(Account)

    if type:
        query = query.filter(Account.type == type)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Account.name.ilike(search_term),
                Account.code.ilike(search_term),
            )
        )

    count = query.count()
    accounts = query.order_by(Account.code).offset(skip).limit(limit).all()
    return accounts, count


# ==================== MUTATIONS ====================

def create_account(db: Session, code: str, name: str, type: AccountType) -> Account:
    """Create a user-defined account. The code doubles as the account id."""
    code = code.strip()
    if not code:
        raise ValidationFailure("Account code is required")

    if get_account_by_code(db, code) or get_account_by_id(db, code):
        raise ValidationFailure(f"Account with code {code} already exists")

    account = Account(id=code, code=code, name=name, type=type, is_system_account=False)
    db.add(account)

    try:
        db.commit()
        db.refresh(account)
        logger.info(f"Account {code} - {name} created")
        return account
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating account: {str(e)}")
        raise ValidationFailure("Failed to create account")


def update_account(
    db: Session,
    account_id: str,
    name: Optional[str] = None,
    type: Optional[AccountType] = None,
) -> Optional[Account]:
    """Rename or retype an account. System accounts can only be renamed."""
    account = get_account_by_id(db, account_id)
    if not account:
        return None

    if account.is_system_account and type is not None and type != account.type:
        raise ValidationFailure(f"System account {account.code} cannot change type")

    if name is not None:
        account.name = name

    if type is not None:
        account.type = type

    try:
        db.commit()
        db.refresh(account)
        return account
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating account: {str(e)}")
        raise ValidationFailure("Failed to update account")


def delete_account(db: Session, account_id: str) -> bool:
    account = get_account_by_id(db, account_id)
    if not account:
        return False

    if account.is_system_account:
        raise ValidationFailure(f"System account {account.code} cannot be deleted")

    # Posted lines keep the account alive
    lines_count = (
        db.query(func.count(JournalEntryLine.id))
        .filter(JournalEntryLine.account_id == account_id)
        .scalar()
    )
    if lines_count > 0:
        raise ValidationFailure("Cannot delete an account that has journal postings")

    db.delete(account)

    try:
        db.commit()
        logger.info(f"Account {account.code} deleted")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting account: {str(e)}")
        raise ValidationFailure("Failed to delete account")


# ==================== ACCOUNTING PERIODS ====================

def get_all_periods(db: Session) -> List[AccountingPeriod]:
    return db.query(AccountingPeriod).order_by(AccountingPeriod.start_date.desc()).all()


def create_period(db: Session, name: str, start_date: date, end_date: date) -> AccountingPeriod:
    if start_date > end_date:
        raise ValidationFailure("Period start date must not be after its end date")

    period_id = f"P{start_date.strftime('%Y%m')}"
    if db.query(AccountingPeriod).filter(AccountingPeriod.id == period_id).first():
        raise ValidationFailure(f"Accounting period {period_id} already exists")

    period = AccountingPeriod(
        id=period_id,
        name=name,
        start_date=start_date,
        end_date=end_date,
        status=PeriodStatus.OPEN,
    )
    db.add(period)
    db.commit()
    db.refresh(period)
    logger.info(f"Accounting period {period_id} opened")
    return period


def close_period(db: Session, period_id: str) -> AccountingPeriod:
    """Mark a period closed. Closing is a status flag only; postings are not blocked."""
    period = (
        db.query(AccountingPeriod)
        .filter(AccountingPeriod.id == period_id)
        .with_for_update()
        .first()
    )
    if not period:
        raise NotFoundError(f"Accounting period {period_id} not found")

    if period.status == PeriodStatus.CLOSED:
        raise AlreadyProcessedError(f"Accounting period {period_id} is already closed")

    period.status = PeriodStatus.CLOSED
    db.commit()
    db.refresh(period)
    logger.info(f"Accounting period {period_id} closed")
    return period
