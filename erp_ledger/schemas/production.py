"""
Production Schemas
Bills of materials, work orders, step checklists and completion
"""

from decimal import Decimal
import datetime as dt
from typing import List, Optional
from pydantic import BaseModel, Field

from erp_ledger.models.production import WorkOrderStatus
from erp_ledger.schemas.inventory import MovementResponse, StockItemResponse


# ============================================================================
# Bill of Materials
# ============================================================================

class BomItemCreate(BaseModel):
    """One raw material per unit of finished good"""
    product_id: str = Field(..., min_length=1, description="Raw material product ID")
    quantity: Decimal = Field(..., gt=0)
    cost: Optional[Decimal] = Field(default=None, ge=0, description="Unit cost, defaults to the product cost")
    waste: Decimal = Field(default=Decimal("0"), ge=0, lt=100, description="Waste allowance in percent")


class BomCreate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    product_id: str = Field(..., min_length=1, description="Finished good product ID")
    items: List[BomItemCreate] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Oak table",
                "product_id": "SP010",
                "items": [
                    {"product_id": "SP020", "quantity": 2, "waste": 5},
                    {"product_id": "SP021", "quantity": 8, "cost": 1500},
                ],
            }
        }


class BomItemResponse(BaseModel):
    product_id: str
    product_name: str
    quantity: Decimal
    cost: Decimal
    waste: Decimal

    class Config:
        from_attributes = True


class BomResponse(BaseModel):
    id: str
    name: str
    product_id: str
    items: List[BomItemResponse]
    total_cost: Decimal
    last_updated: dt.date

    class Config:
        from_attributes = True


class BomListResponse(BaseModel):
    data: List[BomResponse]
    count: int


# ============================================================================
# Work Orders
# ============================================================================

class WorkOrderCreate(BaseModel):
    bom_id: str = Field(..., min_length=1)
    product_id: Optional[str] = Field(default=None, description="Defaults to the BOM's product")
    quantity_to_produce: Decimal = Field(..., gt=0)
    warehouse: str = Field(..., min_length=1)
    creation_date: Optional[dt.date] = None
    notes: Optional[str] = None


class WorkOrderStatusUpdate(BaseModel):
    status: WorkOrderStatus


class ProductionStepUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    completed: bool = False


class WorkOrderStepsUpdate(BaseModel):
    steps: List[ProductionStepUpdate] = Field(..., min_length=1)


class WorkOrderComplete(BaseModel):
    actual_cost: Optional[Decimal] = Field(default=None, ge=0, description="Defaults to the estimated cost")


class ProductionStepResponse(BaseModel):
    name: str
    completed: bool

    class Config:
        from_attributes = True


class WorkOrderResponse(BaseModel):
    id: str
    product_id: str
    product_name: str
    quantity_to_produce: Decimal
    bom_id: str
    status: WorkOrderStatus
    creation_date: dt.date
    completion_date: Optional[dt.date] = None
    warehouse: str
    notes: Optional[str] = None
    estimated_cost: Decimal
    actual_cost: Optional[Decimal] = None
    production_steps: List[ProductionStepResponse]

    class Config:
        from_attributes = True


class WorkOrderListResponse(BaseModel):
    data: List[WorkOrderResponse]
    count: int


class WorkOrderEventResponse(BaseModel):
    success: bool = True
    updated_work_order: WorkOrderResponse
    updated_stock: List[StockItemResponse]
    new_movements: List[MovementResponse]


class MaterialRequirement(BaseModel):
    product_id: str
    product_name: str
    required_quantity: Decimal
    available_quantity: Decimal
    shortfall: Decimal
    sufficient: bool


class WorkOrderRequirementsResponse(BaseModel):
    work_order_id: str
    warehouse: str
    requirements: List[MaterialRequirement]
    feasible: bool
