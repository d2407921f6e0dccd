from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field

from erp_ledger.models.catalog import ProductType


# ==================== PRODUCTS ====================

class ProductCreate(BaseModel):
    id: Optional[str] = Field(default=None, max_length=20, description="Generated when omitted")
    name: str = Field(..., min_length=1, max_length=150)
    sku: Optional[str] = Field(default=None, max_length=50)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    cost: Decimal = Field(default=Decimal("0"), ge=0)
    min_stock: Decimal = Field(default=Decimal("0"), ge=0)
    product_type: ProductType = ProductType.STANDARD


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    sku: Optional[str] = Field(default=None, max_length=50)
    price: Optional[Decimal] = Field(default=None, ge=0)
    cost: Optional[Decimal] = Field(default=None, ge=0)
    min_stock: Optional[Decimal] = Field(default=None, ge=0)
    product_type: Optional[ProductType] = None


class ProductResponse(BaseModel):
    id: str
    name: str
    sku: Optional[str] = None
    price: Decimal
    cost: Decimal
    min_stock: Decimal
    product_type: ProductType

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    data: List[ProductResponse]
    count: int


# ==================== CUSTOMERS / SUPPLIERS ====================

class CustomerCreate(BaseModel):
    id: Optional[str] = Field(default=None, max_length=20)
    name: str = Field(..., min_length=1, max_length=150)
    email: Optional[str] = None
    phone: Optional[str] = None


class CustomerResponse(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class CustomerListResponse(BaseModel):
    data: List[CustomerResponse]
    count: int


class SupplierCreate(BaseModel):
    id: Optional[str] = Field(default=None, max_length=20)
    name: str = Field(..., min_length=1, max_length=150)
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class SupplierResponse(BaseModel):
    id: str
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class SupplierListResponse(BaseModel):
    data: List[SupplierResponse]
    count: int


# ==================== WAREHOUSES ====================

class WarehouseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class WarehouseResponse(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True
