from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from erp_ledger.common.exceptions import error_status
from erp_ledger.core.dependencies import get_db
from erp_ledger.logger_config import logger
from erp_ledger.schemas.report import (
    AccountBalance,
    AccountingSummaryResponse,
    AccountLedgerResponse,
    AgingRow,
    ProfitAndLossResponse,
    TrialBalanceResponse,
)
from erp_ledger.services import reporting_service

router = APIRouter()


@router.get("/account-balances", response_model=List[AccountBalance])
def account_balances(as_of: Optional[date] = Query(None), db: Session = Depends(get_db)):
    return reporting_service.get_account_balances(db, as_of=as_of)


@router.get("/accounts/{account_id}/ledger", response_model=AccountLedgerResponse)
def account_ledger(account_id: str, db: Session = Depends(get_db)):
    try:
        return reporting_service.get_account_ledger(db, account_id)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.get("/trial-balance", response_model=TrialBalanceResponse)
def trial_balance(as_of: Optional[date] = Query(None), db: Session = Depends(get_db)):
    """Debit and credit totals of every account; flags an imbalance instead of failing."""
    return reporting_service.get_trial_balance(db, as_of=as_of)


@router.get("/profit-and-loss", response_model=ProfitAndLossResponse)
def profit_and_loss(period: str = Query("month"), db: Session = Depends(get_db)):
    try:
        return reporting_service.get_profit_and_loss(db, period=period)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.get("/receivables", response_model=List[AgingRow])
def receivables(db: Session = Depends(get_db)):
    return reporting_service.get_receivables_aging(db)


@router.get("/payables", response_model=List[AgingRow])
def payables(db: Session = Depends(get_db)):
    return reporting_service.get_payables_aging(db)


@router.get("/summary", response_model=AccountingSummaryResponse)
def accounting_summary(db: Session = Depends(get_db)):
    try:
        return reporting_service.get_accounting_summary(db)
    except Exception:
        logger.exception("Error building accounting summary")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build accounting summary",
        )
