from decimal import Decimal
import datetime as dt
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator


# ============================================================================
# Request Schemas
# ============================================================================

class JournalLineCreate(BaseModel):
    account_id: str = Field(..., min_length=1)
    debit: Decimal = Field(default=Decimal("0"), ge=0)
    credit: Decimal = Field(default=Decimal("0"), ge=0)


class JournalEntryCreate(BaseModel):
    """Manual journal entry. Debits must equal credits."""
    date: Optional[dt.date] = None
    description: str = Field(..., min_length=1, max_length=255)
    reference_id: Optional[str] = None
    lines: List[JournalLineCreate] = Field(..., min_length=2)

    class Config:
        json_schema_extra = {
            "example": {
                "date": "2024-07-31",
                "description": "July office rent",
                "lines": [
                    {"account_id": "6421", "debit": 15000000, "credit": 0},
                    {"account_id": "112", "debit": 0, "credit": 15000000},
                ],
            }
        }


class JournalEntryReverse(BaseModel):
    date: Optional[dt.date] = None

    @model_validator(mode="after")
    def no_future_reversal(self):
        if self.date and self.date > dt.date.today():
            raise ValueError("Reversal date cannot be in the future")
        return self


# ============================================================================
# Response Schemas
# ============================================================================

class JournalLineResponse(BaseModel):
    account_id: str
    account_code: str
    account_name: str
    debit: Decimal
    credit: Decimal

    class Config:
        from_attributes = True


class JournalEntryResponse(BaseModel):
    id: str
    date: dt.date
    description: str
    reference_id: Optional[str] = None
    reversal_of_id: Optional[str] = None
    total_debit: Decimal
    total_credit: Decimal
    created_at: Optional[dt.datetime] = None
    lines: List[JournalLineResponse]

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": "JE001",
                "date": "2024-07-20",
                "description": "Revenue recognition for order DH001",
                "reference_id": "DH001",
                "reversal_of_id": None,
                "total_debit": "1100000.00",
                "total_credit": "1100000.00",
                "lines": [
                    {"account_id": "131", "account_code": "131", "account_name": "Accounts receivable", "debit": "1100000.00", "credit": "0.00"},
                    {"account_id": "511", "account_code": "511", "account_name": "Sales revenue", "debit": "0.00", "credit": "1000000.00"},
                    {"account_id": "3331", "account_code": "3331", "account_name": "VAT payable", "debit": "0.00", "credit": "100000.00"},
                ],
            }
        }


class JournalEntryListResponse(BaseModel):
    data: List[JournalEntryResponse]
    count: int
    total_dic: dict


class JournalEntryEventResponse(BaseModel):
    success: bool = True
    new_journal_entry: JournalEntryResponse
