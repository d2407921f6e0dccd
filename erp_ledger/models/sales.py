import enum
from datetime import date
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from erp_ledger.core.database import Base
from erp_ledger.models.payment import PaymentMethod, PaymentStatus


class OrderStatus(str, enum.Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class SalesReturnStatus(str, enum.Enum):
    COMPLETED = "Completed"


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(20), primary_key=True)
    customer_id = Column(String(20), ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True)
    customer_name = Column(String(150), nullable=False)
    date = Column(Date, nullable=False, default=date.today)

    subtotal = Column(Numeric(15, 2), nullable=False, default=0)
    discount = Column(Numeric(15, 2), nullable=False, default=0)
    tax = Column(Numeric(15, 2), nullable=False, default=0)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)  # percent
    total = Column(Numeric(15, 2), nullable=False, default=0)

    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    payment_method = Column(Enum(PaymentMethod), nullable=False, default=PaymentMethod.CASH)
    payment_status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.UNPAID)
    amount_paid = Column(Numeric(15, 2), nullable=False, default=0)
    warehouse = Column(String(100), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
        lazy="selectin",
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(20), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(20), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    product_name = Column(String(150), nullable=False)
    quantity = Column(Numeric(15, 4), nullable=False)
    price = Column(Numeric(15, 2), nullable=False)

    order = relationship("Order", back_populates="items")


class SalesReturn(Base):
    __tablename__ = "sales_returns"

    id = Column(String(20), primary_key=True)
    original_order_id = Column(String(20), ForeignKey("orders.id", ondelete="RESTRICT"), nullable=False, index=True)
    customer_id = Column(String(20), nullable=False)
    customer_name = Column(String(150), nullable=False)
    date = Column(Date, nullable=False, default=date.today)
    total_refund = Column(Numeric(15, 2), nullable=False)  # tax included
    status = Column(Enum(SalesReturnStatus), nullable=False, default=SalesReturnStatus.COMPLETED)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship(
        "SalesReturnItem",
        back_populates="sales_return",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class SalesReturnItem(Base):
    __tablename__ = "sales_return_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sales_return_id = Column(String(20), ForeignKey("sales_returns.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(20), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    product_name = Column(String(150), nullable=False)
    quantity = Column(Numeric(15, 4), nullable=False)
    price = Column(Numeric(15, 2), nullable=False)  # price it was sold at

    sales_return = relationship("SalesReturn", back_populates="items")
