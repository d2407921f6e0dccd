"""
Manufacturing models: BillOfMaterials, BillOfMaterialsItem, WorkOrder, ProductionStep.
A BOM lists the raw materials (with waste allowance) consumed per unit of a finished good.
Work orders move through Pending -> InProgress -> Completed; completion consumes raw
materials and receives the finished good in the work order's warehouse.
"""

import enum
from datetime import date

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from erp_ledger.core.database import Base


DEFAULT_PRODUCTION_STEPS = (
    "Material preparation",
    "Assembly",
    "Quality control",
    "Packaging",
)


class WorkOrderStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


class BillOfMaterials(Base):
    """One recipe per finished good. total_cost includes each line's waste allowance."""

    __tablename__ = "bills_of_materials"

    id = Column(String(20), primary_key=True)
    name = Column(String(200), nullable=False)
    product_id = Column(String(20), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    total_cost = Column(Numeric(15, 2), nullable=False, default=0)
    last_updated = Column(Date, nullable=False, default=date.today)

    items = relationship(
        "BillOfMaterialsItem",
        back_populates="bom",
        cascade="all, delete-orphan",
        order_by="BillOfMaterialsItem.id",
        lazy="selectin",
    )


class BillOfMaterialsItem(Base):
    """
    Raw material required per 1 unit of finished good.
    waste is a percentage: quantity 2 with waste 5 consumes 2.1 per unit.
    """

    __tablename__ = "bill_of_materials_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bom_id = Column(String(20), ForeignKey("bills_of_materials.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(20), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    product_name = Column(String(150), nullable=False)
    quantity = Column(Numeric(15, 4), nullable=False)
    cost = Column(Numeric(15, 2), nullable=False, default=0)
    waste = Column(Numeric(5, 2), nullable=False, default=0)

    bom = relationship("BillOfMaterials", back_populates="items")


class WorkOrder(Base):
    __tablename__ = "work_orders"

    id = Column(String(20), primary_key=True)
    product_id = Column(String(20), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    product_name = Column(String(150), nullable=False)
    quantity_to_produce = Column(Numeric(15, 4), nullable=False)
    bom_id = Column(String(20), ForeignKey("bills_of_materials.id", ondelete="RESTRICT"), nullable=False)
    status = Column(Enum(WorkOrderStatus), nullable=False, default=WorkOrderStatus.PENDING)
    creation_date = Column(Date, nullable=False, default=date.today)
    completion_date = Column(Date, nullable=True)
    warehouse = Column(String(100), nullable=False)
    notes = Column(Text, nullable=True)
    estimated_cost = Column(Numeric(15, 2), nullable=False, default=0)
    actual_cost = Column(Numeric(15, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    bom = relationship("BillOfMaterials")
    production_steps = relationship(
        "ProductionStep",
        back_populates="work_order",
        cascade="all, delete-orphan",
        order_by="ProductionStep.position",
        lazy="selectin",
    )


class ProductionStep(Base):
    __tablename__ = "production_steps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    work_order_id = Column(String(20), ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    name = Column(String(100), nullable=False)
    completed = Column(Boolean, nullable=False, default=False)

    work_order = relationship("WorkOrder", back_populates="production_steps")
