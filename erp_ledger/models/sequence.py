from sqlalchemy import Column, Integer, String
from erp_ledger.core.database import Base


class DocumentSequence(Base):
    """Last number handed out per document prefix (JE, DH, PO, ...)."""

    __tablename__ = "document_sequences"

    prefix = Column(String(20), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
