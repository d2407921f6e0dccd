"""
Inventory models: per-(product, warehouse) stock rows, the append-only movement log,
and the two inventory documents that only move stock (adjustments and transfers).
"""

import enum
from datetime import date
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from erp_ledger.core.database import Base


class MovementType(str, enum.Enum):
    PURCHASE_RECEIPT = "PurchaseReceipt"
    SALES_ISSUE = "SalesIssue"
    SALES_RETURN = "SalesReturn"
    TRANSFER_OUT = "TransferOut"
    TRANSFER_IN = "TransferIn"
    ADJUSTMENT = "Adjustment"
    PRODUCTION_ISSUE = "ProductionIssue"
    PRODUCTION_RECEIPT = "ProductionReceipt"


class TransferStatus(str, enum.Enum):
    COMPLETED = "Completed"


class InventoryItem(Base):
    """Current stock of one product in one warehouse."""

    __tablename__ = "inventory_stock"
    __table_args__ = (UniqueConstraint("product_id", "warehouse", name="uq_stock_product_warehouse"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(String(20), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    warehouse = Column(String(100), nullable=False, index=True)
    stock = Column(Numeric(15, 4), nullable=False, default=0)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product = relationship("Product")


class InventoryMovement(Base):
    """
    Audit record of a stock change. quantity_change < 0 leaves from_warehouse,
    quantity_change > 0 enters to_warehouse. Summing the movements of a
    (product, warehouse) pair reproduces its stock row.
    """

    __tablename__ = "inventory_movements"

    id = Column(String(20), primary_key=True)
    date = Column(Date, nullable=False, default=date.today, index=True)
    product_id = Column(String(20), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    product_name = Column(String(150), nullable=False)
    type = Column(Enum(MovementType), nullable=False)
    quantity_change = Column(Numeric(15, 4), nullable=False)
    from_warehouse = Column(String(100), nullable=True)
    to_warehouse = Column(String(100), nullable=True)
    reference_id = Column(String(30), nullable=False, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    # posting order, taken from the IM document sequence
    seq = Column(Integer, nullable=False, default=0, index=True)


class InventoryAdjustment(Base):
    __tablename__ = "inventory_adjustments"

    id = Column(String(20), primary_key=True)
    date = Column(Date, nullable=False, default=date.today)
    warehouse = Column(String(100), nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship(
        "InventoryAdjustmentItem",
        back_populates="adjustment",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class InventoryAdjustmentItem(Base):
    __tablename__ = "inventory_adjustment_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    adjustment_id = Column(String(20), ForeignKey("inventory_adjustments.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(20), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    product_name = Column(String(150), nullable=False)
    system_stock = Column(Numeric(15, 4), nullable=False)  # stock before adjustment
    actual_stock = Column(Numeric(15, 4), nullable=False)  # counted
    difference = Column(Numeric(15, 4), nullable=False)    # actual - system

    adjustment = relationship("InventoryAdjustment", back_populates="items")


class StockTransfer(Base):
    __tablename__ = "stock_transfers"

    id = Column(String(20), primary_key=True)
    date = Column(Date, nullable=False, default=date.today)
    from_warehouse = Column(String(100), nullable=False)
    to_warehouse = Column(String(100), nullable=False)
    status = Column(Enum(TransferStatus), nullable=False, default=TransferStatus.COMPLETED)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship(
        "StockTransferItem",
        back_populates="transfer",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class StockTransferItem(Base):
    __tablename__ = "stock_transfer_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transfer_id = Column(String(20), ForeignKey("stock_transfers.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(20), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    product_name = Column(String(150), nullable=False)
    quantity = Column(Numeric(15, 4), nullable=False)

    transfer = relationship("StockTransfer", back_populates="items")
