"""
Sales Schemas
Orders, point-of-sale orders, customer payments and sales returns
"""

from decimal import Decimal
import datetime as dt
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from erp_ledger.models.payment import PaymentMethod, PaymentStatus
from erp_ledger.models.sales import OrderStatus, SalesReturnStatus
from erp_ledger.schemas.inventory import MovementResponse, StockItemResponse, StockWarning
from erp_ledger.schemas.journal import JournalEntryResponse


# ============================================================================
# Request Schemas - Order
# ============================================================================

class OrderItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    product_name: Optional[str] = None
    quantity: Decimal = Field(..., gt=0)
    price: Optional[Decimal] = Field(default=None, ge=0, description="Defaults to the product price")


class OrderCreate(BaseModel):
    """
    Omitted subtotal / tax / total are computed from the items;
    when given, total must equal subtotal - discount + tax.
    """
    customer_id: str = Field(..., min_length=1)
    customer_name: Optional[str] = None
    date: Optional[dt.date] = None
    warehouse: str = Field(..., min_length=1)
    items: List[OrderItemCreate] = Field(..., min_length=1)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    subtotal: Optional[Decimal] = Field(default=None, ge=0)
    tax: Optional[Decimal] = Field(default=None, ge=0)
    total: Optional[Decimal] = Field(default=None, ge=0)
    payment_method: PaymentMethod = PaymentMethod.CASH
    status: OrderStatus = OrderStatus.PENDING

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "KH001",
                "warehouse": "Main warehouse",
                "items": [{"product_id": "SP001", "quantity": 2, "price": 500000}],
                "discount": 0,
                "tax_rate": 10,
                "payment_method": "BankTransfer",
            }
        }


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Payment amount (must be positive)")
    method: Optional[PaymentMethod] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        """Ensure amount has at most 2 decimal places"""
        if v.as_tuple().exponent < -2:
            raise ValueError("Amount must have at most 2 decimal places")
        return v


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class SalesReturnItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: Decimal = Field(..., gt=0)


class SalesReturnCreate(BaseModel):
    items: List[SalesReturnItemCreate] = Field(..., min_length=1)
    pre_tax_refund: Decimal = Field(..., gt=0, description="Refund before VAT")
    date: Optional[dt.date] = None


# ============================================================================
# Response Schemas
# ============================================================================

class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    quantity: Decimal
    price: Decimal

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: str
    customer_id: str
    customer_name: str
    date: dt.date
    items: List[OrderItemResponse]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    tax_rate: Decimal
    total: Decimal
    status: OrderStatus
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    amount_paid: Decimal
    warehouse: str

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    data: List[OrderResponse]
    count: int


class OrderEventResponse(BaseModel):
    success: bool = True
    updated_order: OrderResponse
    new_journal_entries: List[JournalEntryResponse]
    updated_stock: List[StockItemResponse]
    new_movements: List[MovementResponse]
    stock_warning: Optional[StockWarning] = None


class OrderPaymentResponse(BaseModel):
    success: bool = True
    updated_order: OrderResponse
    new_journal_entry: JournalEntryResponse


class OrderStatusResponse(BaseModel):
    success: bool = True
    updated_order: OrderResponse


class SalesReturnItemResponse(BaseModel):
    product_id: str
    product_name: str
    quantity: Decimal
    price: Decimal

    class Config:
        from_attributes = True


class SalesReturnResponse(BaseModel):
    id: str
    original_order_id: str
    customer_id: str
    customer_name: str
    date: dt.date
    items: List[SalesReturnItemResponse]
    total_refund: Decimal
    status: SalesReturnStatus

    class Config:
        from_attributes = True


class SalesReturnEventResponse(BaseModel):
    success: bool = True
    new_return: SalesReturnResponse
    updated_stock: List[StockItemResponse]
    new_movements: List[MovementResponse]
    new_journal_entry: JournalEntryResponse


class SalesReturnListResponse(BaseModel):
    data: List[SalesReturnResponse]
    count: int
