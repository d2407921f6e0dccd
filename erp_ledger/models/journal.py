from datetime import date
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from erp_ledger.core.database import Base


class JournalEntry(Base):
    """
    One balanced accounting event. Append-only: corrections are posted as a
    reversing entry pointing back through reversal_of_id.
    """

    __tablename__ = "journal_entries"

    id = Column(String(20), primary_key=True)
    date = Column(Date, nullable=False, default=date.today, index=True)
    description = Column(String(255), nullable=False)
    reference_id = Column(String(30), nullable=True, index=True)  # DH / PO / SR / JE id
    reversal_of_id = Column(String(20), ForeignKey("journal_entries.id"), nullable=True, unique=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    # posting order across automatic (JE) and manual (JE-M) entries
    seq = Column(Integer, nullable=False, default=0, index=True)

    lines = relationship(
        "JournalEntryLine",
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="JournalEntryLine.id",
        lazy="selectin",
    )

    @property
    def total_debit(self):
        return sum((line.debit for line in self.lines), 0)

    @property
    def total_credit(self):
        return sum((line.credit for line in self.lines), 0)


class JournalEntryLine(Base):
    """A single debit or credit posting. Account code/name are snapshotted at posting time."""

    __tablename__ = "journal_entry_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    journal_entry_id = Column(String(20), ForeignKey("journal_entries.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id = Column(String(20), ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False, index=True)
    account_code = Column(String(20), nullable=False)
    account_name = Column(String(150), nullable=False)
    debit = Column(Numeric(15, 2), nullable=False, default=0)
    credit = Column(Numeric(15, 2), nullable=False, default=0)

    journal_entry = relationship("JournalEntry", back_populates="lines")
    account = relationship("Account")
