from typing import List, Optional, Tuple
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from erp_ledger.logger_config import logger
from erp_ledger.models.journal import JournalEntry, JournalEntryLine
from erp_ledger.utils.amounts import money
from erp_ledger.utils.filteration import apply_date_range


class FinancialLedgerService:
    """
    getting the general journal
    """
    def __init__(self, db: Session):
        self.db = db

    # ================= GET JOURNAL ENTRIES ===================

    def get_all_journal_entries(
        self,
        skip: int = 0,
        limit: int = 25,
        search: Optional[str] = None,
        account_id: Optional[str] = None,
        reference_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Tuple[List[JournalEntry], int, dict]:

        try:
            query = self.db.query(JournalEntry)

            if reference_id:
                query = query.filter(JournalEntry.reference_id == reference_id)

            if account_id:
                query = query.filter(
                    JournalEntry.lines.any(JournalEntryLine.account_id == account_id)
                )

            if search:
                query = query.filter(
                    or_(
                        JournalEntry.id.ilike(f"%{search}%"),
                        JournalEntry.description.ilike(f"%{search}%"),
                        JournalEntry.reference_id.ilike(f"%{search}%"),
                    )
                )

            query = apply_date_range(query, JournalEntry.date, start_date, end_date)

            # Count (before pagination)
            total_count = query.count()

            # Totals over every line of the matching entries
            entry_ids = query.with_entities(JournalEntry.id).subquery()
            totals_row = (
                self.db.query(
                    func.coalesce(func.sum(JournalEntryLine.debit), 0),
                    func.coalesce(func.sum(JournalEntryLine.credit), 0),
                )
                .filter(JournalEntryLine.journal_entry_id.in_(entry_ids.select()))
                .first()
            )

            totals = {
                "total_debit": money(totals_row[0]),
                "total_credit": money(totals_row[1]),
            }

            # Pagination, newest first
            rows = (
                query
                .order_by(JournalEntry.date.desc(), JournalEntry.seq.desc())
                .offset(skip)
                .limit(limit)
                .all()
            )

            return rows, total_count, totals

        except Exception:
            logger.exception("Error while fetching journal entries")
            raise
