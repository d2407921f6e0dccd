from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from erp_ledger.common.exceptions import (
    AlreadyProcessedError,
    NotFoundError,
    UnbalancedEntryError,
    ValidationFailure,
)
from erp_ledger.logger_config import logger
from erp_ledger.models.account import Account
from erp_ledger.models.journal import JournalEntry, JournalEntryLine
from erp_ledger.services import account_service, sequence_service
from erp_ledger.utils.amounts import ZERO, money

# (account, debit, credit)
LineSpec = Tuple[Account, Decimal, Decimal]


def debit(db: Session, code: str, amount) -> LineSpec:
    return account_service.require_account_by_code(db, code), money(amount), ZERO


def credit(db: Session, code: str, amount) -> LineSpec:
    return account_service.require_account_by_code(db, code), ZERO, money(amount)


def validate_lines(lines: Iterable[LineSpec]) -> List[LineSpec]:
    """
    Drop all-zero lines, then check what is left: no negative amounts, one
    side per line, at least two lines, equal positive totals.
    """
    kept = [(account, money(d), money(c)) for account, d, c in lines if money(d) != 0 or money(c) != 0]

    for account, d, c in kept:
        if d < 0 or c < 0:
            raise UnbalancedEntryError(f"Line for account {account.code} has a negative amount")
        if d > 0 and c > 0:
            raise UnbalancedEntryError(f"Line for account {account.code} has both a debit and a credit")

    if len(kept) < 2:
        raise UnbalancedEntryError("A journal entry needs at least two non-zero lines")

    total_debit = sum((d for _, d, _ in kept), ZERO)
    total_credit = sum((c for _, _, c in kept), ZERO)
    if total_debit != total_credit:
        raise UnbalancedEntryError(
            f"Journal entry is not balanced: debit {total_debit} != credit {total_credit}"
        )
    return kept


def post_journal_entry(
    db: Session,
    description: str,
    lines: Iterable[LineSpec],
    reference_id: Optional[str] = None,
    entry_date: Optional[date] = None,
    prefix: str = sequence_service.JOURNAL_ENTRY,
    reversal_of_id: Optional[str] = None,
) -> JournalEntry:
    """
    Validate and add an entry to the caller's transaction. Does not commit;
    an UnbalancedEntryError leaves nothing behind once the caller rolls back.
    """
    kept = validate_lines(lines)

    entry = JournalEntry(
        id=sequence_service.next_document_id(db, prefix),
        seq=sequence_service.next_sequence_value(db, sequence_service.JOURNAL_POSTING),
        date=entry_date or date.today(),
        description=description,
        reference_id=reference_id,
        reversal_of_id=reversal_of_id,
    )
    for account, d, c in kept:
        entry.lines.append(JournalEntryLine(
            account_id=account.id,
            account_code=account.code,
            account_name=account.name,
            debit=d,
            credit=c,
        ))

    db.add(entry)
    db.flush()
    logger.info(f"Journal entry {entry.id} posted: {description} ({entry.total_debit})")
    return entry


def create_journal_entry(
    db: Session,
    description: str,
    lines: List[dict],
    entry_date: Optional[date] = None,
    reference_id: Optional[str] = None,
) -> JournalEntry:
    """Post a manual (JE-M) entry. Each line is {account_id, debit, credit}."""
    logger.info(f"Creating manual journal entry: {description}")

    try:
        if not description or not description.strip():
            raise ValidationFailure("Description is required")

        specs = []
        for line in lines:
            account = account_service.get_account_by_id(db, line["account_id"])
            if not account:
                raise ValidationFailure(f"Account {line['account_id']} does not exist")
            specs.append((account, line.get("debit") or 0, line.get("credit") or 0))

        entry = post_journal_entry(
            db,
            description=description.strip(),
            lines=specs,
            reference_id=reference_id,
            entry_date=entry_date,
            prefix=sequence_service.MANUAL_JOURNAL_ENTRY,
        )
        db.commit()
        db.refresh(entry)
        return entry

    except ValueError:
        db.rollback()
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Integrity error creating journal entry: {str(e)}")
        raise ValidationFailure("Failed to create journal entry")


def reverse_journal_entry(db: Session, entry_id: str, entry_date: Optional[date] = None) -> JournalEntry:
    """
    Post the mirror image of an entry: every debit becomes a credit and vice
    versa. An entry can be reversed once, and reversals are not reversible.
    """
    logger.info(f"Reversing journal entry {entry_id}")

    try:
        original = (
            db.query(JournalEntry)
            .filter(JournalEntry.id == entry_id)
            .with_for_update()
            .first()
        )
        if not original:
            raise NotFoundError(f"Journal entry {entry_id} not found")

        if original.reversal_of_id:
            raise ValidationFailure(f"Journal entry {entry_id} is itself a reversal")

        existing = db.query(JournalEntry).filter(JournalEntry.reversal_of_id == entry_id).first()
        if existing:
            raise AlreadyProcessedError(f"Journal entry {entry_id} was already reversed by {existing.id}")

        lines = [(line.account, money(line.credit), money(line.debit)) for line in original.lines]
        reversal = post_journal_entry(
            db,
            description=f"Reversal of {original.id}: {original.description}",
            lines=lines,
            reference_id=original.reference_id,
            entry_date=entry_date,
            reversal_of_id=original.id,
        )
        db.commit()
        db.refresh(reversal)
        return reversal

    except ValueError:
        db.rollback()
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Integrity error reversing {entry_id}: {str(e)}")
        raise AlreadyProcessedError(f"Journal entry {entry_id} was already reversed")


def get_journal_entry(db: Session, entry_id: str) -> Optional[JournalEntry]:
    return db.query(JournalEntry).filter(JournalEntry.id == entry_id).first()


def get_entries_for_reference(db: Session, reference_id: str) -> List[JournalEntry]:
    return (
        db.query(JournalEntry)
        .filter(JournalEntry.reference_id == reference_id)
        .order_by(JournalEntry.seq)
        .all()
    )
