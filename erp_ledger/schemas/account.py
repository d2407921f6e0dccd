import datetime as dt
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from erp_ledger.models.account import AccountType, PeriodStatus


class AccountBase(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=150)
    type: AccountType


class AccountCreate(AccountBase):
    class Config:
        json_schema_extra = {
            "example": {"code": "6422", "name": "Utilities expense", "type": "Expense"}
        }


class AccountUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    type: Optional[AccountType] = None


class AccountResponse(AccountBase):
    id: str
    is_system_account: bool

    class Config:
        from_attributes = True


class AccountListResponse(BaseModel):
    data: List[AccountResponse]
    count: int


class PeriodCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    start_date: dt.date
    end_date: dt.date

    @model_validator(mode="after")
    def validate_range(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class PeriodResponse(BaseModel):
    id: str
    name: str
    start_date: dt.date
    end_date: dt.date
    status: PeriodStatus

    class Config:
        from_attributes = True
