"""
Purchase Schemas
Purchase orders, receipt status changes and supplier payments
"""

from decimal import Decimal
import datetime as dt
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from erp_ledger.models.payment import PaymentStatus
from erp_ledger.models.purchase import PurchaseOrderStatus
from erp_ledger.schemas.inventory import MovementResponse, StockItemResponse
from erp_ledger.schemas.journal import JournalEntryResponse


# ============================================================================
# Request Schemas
# ============================================================================

class PurchaseOrderItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    product_name: Optional[str] = None
    quantity: Decimal = Field(..., gt=0, description="Quantity to purchase (must be positive)")
    cost: Optional[Decimal] = Field(default=None, ge=0, description="Unit cost, defaults to the product cost")

    @field_validator("cost")
    @classmethod
    def validate_cost(cls, v):
        """Ensure cost has at most 2 decimal places"""
        if v is not None and v.as_tuple().exponent < -2:
            raise ValueError("Cost must have at most 2 decimal places")
        return v


class PurchaseOrderCreate(BaseModel):
    supplier_id: str = Field(..., min_length=1)
    warehouse: str = Field(..., min_length=1)
    order_date: Optional[dt.date] = None
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    status: PurchaseOrderStatus = PurchaseOrderStatus.DRAFT
    items: List[PurchaseOrderItemCreate] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "supplier_id": "NCC001",
                "warehouse": "Main warehouse",
                "tax_rate": 10,
                "status": "Ordered",
                "items": [{"product_id": "SP001", "quantity": 20, "cost": 500000}],
            }
        }


class PurchaseOrderStatusUpdate(BaseModel):
    status: PurchaseOrderStatus


class SupplierPaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Payment amount (must be positive)")


# ============================================================================
# Response Schemas
# ============================================================================

class PurchaseOrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    quantity: Decimal
    cost: Decimal

    class Config:
        from_attributes = True


class PurchaseOrderResponse(BaseModel):
    id: str
    supplier_id: str
    supplier_name: str
    order_date: dt.date
    received_date: Optional[dt.date] = None
    items: List[PurchaseOrderItemResponse]
    subtotal: Decimal
    tax: Decimal
    tax_rate: Decimal
    total: Decimal
    status: PurchaseOrderStatus
    payment_status: PaymentStatus
    amount_paid: Decimal
    warehouse: str

    class Config:
        from_attributes = True


class PurchaseOrderListResponse(BaseModel):
    data: List[PurchaseOrderResponse]
    count: int


class PurchaseOrderEventResponse(BaseModel):
    success: bool = True
    updated_po: PurchaseOrderResponse
    new_movements: List[MovementResponse]
    updated_stock: List[StockItemResponse]
    new_journal_entry: Optional[JournalEntryResponse] = None


class PurchasePaymentResponse(BaseModel):
    success: bool = True
    updated_po: PurchaseOrderResponse
    new_journal_entry: JournalEntryResponse
