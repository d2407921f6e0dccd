import enum
from datetime import date
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from erp_ledger.core.database import Base
from erp_ledger.models.payment import PaymentStatus


class PurchaseOrderStatus(str, enum.Enum):
    DRAFT = "Draft"
    ORDERED = "Ordered"
    RECEIVED = "Received"


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"

    id = Column(String(20), primary_key=True)
    supplier_id = Column(String(20), ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True)
    supplier_name = Column(String(150), nullable=False)
    order_date = Column(Date, nullable=False, default=date.today)
    received_date = Column(Date, nullable=True)

    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    tax = Column(Numeric(15, 2), nullable=False, default=0)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
    total = Column(Numeric(15, 2), nullable=False, default=0)

    status = Column(Enum(PurchaseOrderStatus), nullable=False, default=PurchaseOrderStatus.DRAFT)
    payment_status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.UNPAID)
    amount_paid = Column(Numeric(15, 2), nullable=False, default=0)
    warehouse = Column(String(100), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship(
        "PurchaseOrderItem",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.id",
        lazy="selectin",
    )


class PurchaseOrderItem(Base):
    __tablename__ = "purchase_order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    purchase_order_id = Column(String(20), ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(20), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    product_name = Column(String(150), nullable=False)
    quantity = Column(Numeric(15, 4), nullable=False)
    cost = Column(Numeric(15, 2), nullable=False)  # per unit

    purchase_order = relationship("PurchaseOrder", back_populates="items")
