from sqlalchemy.orm import Session

from erp_ledger.core.config import settings
from erp_ledger.logger_config import logger
from erp_ledger.models.sequence import DocumentSequence


# Document prefixes handed out by the ledger
JOURNAL_ENTRY = "JE"
MANUAL_JOURNAL_ENTRY = "JE-M"
JOURNAL_POSTING = "POSTING"
ORDER = "DH"
PURCHASE_ORDER = "PO"
SALES_RETURN = "SR"
ADJUSTMENT = "ADJ"
STOCK_TRANSFER = "ST"
BOM = "BOM"
WORK_ORDER = "LSX"
MOVEMENT = "IM"
PRODUCT = "SP"
CUSTOMER = "KH"
SUPPLIER = "NCC"
WAREHOUSE = "WH"

KNOWN_PREFIXES = (
    JOURNAL_ENTRY, MANUAL_JOURNAL_ENTRY, JOURNAL_POSTING, ORDER, PURCHASE_ORDER,
    SALES_RETURN, ADJUSTMENT, STOCK_TRANSFER, BOM, WORK_ORDER, MOVEMENT,
    PRODUCT, CUSTOMER, SUPPLIER, WAREHOUSE,
)


def format_document_id(prefix: str, value: int) -> str:
    return f"{prefix}{str(value).zfill(settings.DOCUMENT_ID_PADDING)}"


def next_sequence_value(db: Session, prefix: str) -> int:
    """
    Increment and return the counter for prefix. The counter row is locked
    FOR UPDATE, so concurrent transactions get distinct values; the lock is
    released when the caller's transaction ends.
    """
    row = (
        db.query(DocumentSequence)
        .filter(DocumentSequence.prefix == prefix)
        .with_for_update()
        .first()
    )
    if row is None:
        row = DocumentSequence(prefix=prefix, last_value=0)
        db.add(row)

    row.last_value += 1
    db.flush()
    return row.last_value


def next_document_id(db: Session, prefix: str) -> str:
    document_id = format_document_id(prefix, next_sequence_value(db, prefix))
    logger.debug(f"Allocated document id {document_id}")
    return document_id


def init_sequences(db: Session) -> None:
    """Create missing counter rows up front so first use never races on INSERT."""
    existing = {p for (p,) in db.query(DocumentSequence.prefix).all()}
    for prefix in KNOWN_PREFIXES:
        if prefix not in existing:
            db.add(DocumentSequence(prefix=prefix, last_value=0))
    db.flush()
