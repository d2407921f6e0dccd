import enum
from sqlalchemy import Column, DateTime, Enum, Numeric, String
from sqlalchemy.sql import func
from erp_ledger.core.database import Base


class ProductType(str, enum.Enum):
    STANDARD = "Standard"
    FINISHED_GOOD = "FinishedGood"
    RAW_MATERIAL = "RawMaterial"


class Product(Base):
    __tablename__ = "products"

    id = Column(String(20), primary_key=True)
    name = Column(String(150), nullable=False)
    sku = Column(String(50), unique=True, nullable=True)
    min_stock = Column(Numeric(15, 4), nullable=False, default=0)
    price = Column(Numeric(15, 2), nullable=False, default=0)  # selling price
    cost = Column(Numeric(15, 2), nullable=False, default=0)   # purchase cost, used for COGS
    product_type = Column(Enum(ProductType), nullable=False, default=ProductType.STANDARD)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(20), primary_key=True)
    name = Column(String(150), nullable=False)
    email = Column(String(150), nullable=True)
    phone = Column(String(30), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(String(20), primary_key=True)
    name = Column(String(150), nullable=False)
    contact_person = Column(String(150), nullable=True)
    email = Column(String(150), nullable=True)
    phone = Column(String(30), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Warehouse(Base):
    __tablename__ = "warehouses"

    id = Column(String(20), primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
