from decimal import Decimal
import datetime as dt
from typing import List, Optional
from pydantic import BaseModel, Field

from erp_ledger.models.inventory import MovementType, TransferStatus


# ============================================================================
# Stock & Movements
# ============================================================================

class StockItemResponse(BaseModel):
    product_id: str
    warehouse: str
    stock: Decimal

    class Config:
        from_attributes = True


class MovementResponse(BaseModel):
    id: str
    date: dt.date
    product_id: str
    product_name: str
    type: MovementType
    quantity_change: Decimal
    from_warehouse: Optional[str] = None
    to_warehouse: Optional[str] = None
    reference_id: str
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class MovementListResponse(BaseModel):
    data: List[MovementResponse]
    count: int
    total_dic: dict


class StockWarning(BaseModel):
    product_id: str
    product_name: str
    warehouse: str
    stock: Decimal
    min_stock: Decimal
    message: str


# ============================================================================
# Adjustments
# ============================================================================

class AdjustmentItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    actual_stock: Decimal = Field(..., ge=0, description="Counted quantity")


class AdjustmentCreate(BaseModel):
    warehouse: str = Field(..., min_length=1)
    date: Optional[dt.date] = None
    notes: Optional[str] = None
    items: List[AdjustmentItemCreate] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "warehouse": "Main warehouse",
                "notes": "Monthly count",
                "items": [{"product_id": "SP001", "actual_stock": 45}],
            }
        }


class AdjustmentItemResponse(BaseModel):
    product_id: str
    product_name: str
    system_stock: Decimal
    actual_stock: Decimal
    difference: Decimal

    class Config:
        from_attributes = True


class AdjustmentResponse(BaseModel):
    id: str
    date: dt.date
    warehouse: str
    notes: Optional[str] = None
    items: List[AdjustmentItemResponse]

    class Config:
        from_attributes = True


class AdjustmentEventResponse(BaseModel):
    success: bool = True
    new_adjustment: AdjustmentResponse
    updated_stock: List[StockItemResponse]
    new_movements: List[MovementResponse]


class AdjustmentListResponse(BaseModel):
    data: List[AdjustmentResponse]
    count: int


# ============================================================================
# Transfers
# ============================================================================

class TransferItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: Decimal = Field(..., gt=0)


class TransferCreate(BaseModel):
    from_warehouse: str = Field(..., min_length=1)
    to_warehouse: str = Field(..., min_length=1)
    date: Optional[dt.date] = None
    notes: Optional[str] = None
    items: List[TransferItemCreate] = Field(..., min_length=1)


class TransferItemResponse(BaseModel):
    product_id: str
    product_name: str
    quantity: Decimal

    class Config:
        from_attributes = True


class TransferResponse(BaseModel):
    id: str
    date: dt.date
    from_warehouse: str
    to_warehouse: str
    status: TransferStatus
    notes: Optional[str] = None
    items: List[TransferItemResponse]

    class Config:
        from_attributes = True


class TransferEventResponse(BaseModel):
    success: bool = True
    new_transfer: TransferResponse
    updated_stock: List[StockItemResponse]
    new_movements: List[MovementResponse]


class TransferListResponse(BaseModel):
    data: List[TransferResponse]
    count: int
