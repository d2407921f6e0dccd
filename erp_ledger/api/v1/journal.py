from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from erp_ledger.common.exceptions import error_status
from erp_ledger.core.dependencies import get_db
from erp_ledger.logger_config import logger
from erp_ledger.schemas.journal import (
    JournalEntryCreate,
    JournalEntryEventResponse,
    JournalEntryListResponse,
    JournalEntryResponse,
    JournalEntryReverse,
)
from erp_ledger.services import journal_service
from erp_ledger.services.financial_ledger import FinancialLedgerService

router = APIRouter()


@router.get("", response_model=JournalEntryListResponse)
def get_list_journal_entries(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    account_id: Optional[str] = Query(None),
    reference_id: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
):
    try:
        service = FinancialLedgerService(db)

        rows, count, totals = service.get_all_journal_entries(
            skip=skip,
            limit=limit,
            search=search,
            account_id=account_id,
            reference_id=reference_id,
            start_date=start_date,
            end_date=end_date,
        )

        return JournalEntryListResponse(data=rows, count=count, total_dic=totals)

    except Exception:
        logger.exception("Error fetching journal entries")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch journal entries",
        )


@router.get("/{entry_id}", response_model=JournalEntryResponse)
def get_journal_entry(entry_id: str, db: Session = Depends(get_db)):
    entry = journal_service.get_journal_entry(db, entry_id)
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Journal entry {entry_id} not found")
    return entry


@router.post("", response_model=JournalEntryEventResponse, status_code=status.HTTP_201_CREATED)
def create_manual_entry(data: JournalEntryCreate, db: Session = Depends(get_db)):
    """Post a manual entry (JE-M). Unbalanced entries are rejected."""
    try:
        entry = journal_service.create_journal_entry(
            db,
            description=data.description,
            lines=[line.model_dump() for line in data.lines],
            entry_date=data.date,
            reference_id=data.reference_id,
        )
        return JournalEntryEventResponse(new_journal_entry=entry)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception("Error creating manual journal entry")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create journal entry")


@router.post("/{entry_id}/reverse", response_model=JournalEntryEventResponse, status_code=status.HTTP_201_CREATED)
def reverse_entry(entry_id: str, data: Optional[JournalEntryReverse] = None, db: Session = Depends(get_db)):
    try:
        entry = journal_service.reverse_journal_entry(db, entry_id, entry_date=data.date if data else None)
        return JournalEntryEventResponse(new_journal_entry=entry)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception(f"Error reversing journal entry {entry_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to reverse journal entry")
