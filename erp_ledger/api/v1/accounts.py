from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from erp_ledger.common.exceptions import error_status
from erp_ledger.core.dependencies import Pagination, get_db
from erp_ledger.logger_config import logger
from erp_ledger.models.account import AccountType
from erp_ledger.schemas.account import (
    AccountCreate,
    AccountListResponse,
    AccountResponse,
    AccountUpdate,
    PeriodCreate,
    PeriodResponse,
)
from erp_ledger.services import account_service

router = APIRouter()


@router.get("", response_model=AccountListResponse)
def list_accounts(
    pagination: Pagination = Depends(),
    type: Optional[AccountType] = Query(None),
    db: Session = Depends(get_db),
):
    """Chart of accounts, ordered by code."""
    accounts, total = account_service.get_all_accounts(
        db, skip=pagination.skip, limit=pagination.limit, search=pagination.search, type=type
    )
    return AccountListResponse(data=accounts, count=total)


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(data: AccountCreate, db: Session = Depends(get_db)):
    try:
        return account_service.create_account(db, code=data.code, name=data.name, type=data.type)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.get("/periods", response_model=List[PeriodResponse])
def list_periods(db: Session = Depends(get_db)):
    return account_service.get_all_periods(db)


@router.post("/periods", response_model=PeriodResponse, status_code=status.HTTP_201_CREATED)
def create_period(data: PeriodCreate, db: Session = Depends(get_db)):
    try:
        return account_service.create_period(db, data.name, data.start_date, data.end_date)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.post("/periods/{period_id}/close", response_model=PeriodResponse)
def close_period(period_id: str, db: Session = Depends(get_db)):
    try:
        return account_service.close_period(db, period_id)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.put("/{account_id}", response_model=AccountResponse)
def update_account(account_id: str, data: AccountUpdate, db: Session = Depends(get_db)):
    try:
        account = account_service.update_account(db, account_id, name=data.name, type=data.type)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))

    if not account:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")
    return account


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(account_id: str, db: Session = Depends(get_db)):
    try:
        deleted = account_service.delete_account(db, account_id)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception(f"Error deleting account {account_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete account")

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")
    return None
