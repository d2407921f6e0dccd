from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_, func
from typing import Optional, List
from decimal import Decimal

from erp_ledger.common.exceptions import NotFoundError, UnknownProductError, ValidationFailure
from erp_ledger.models.catalog import Customer, Product, ProductType, Supplier, Warehouse
from erp_ledger.services import sequence_service
from erp_ledger.utils.amounts import money, quantity
from erp_ledger.logger_config import logger


def _commit(db: Session, instance, what: str):
    try:
        db.commit()
        db.refresh(instance)
        return instance
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error saving {what}: {str(e)}")
        raise ValidationFailure(f"Failed to save {what}")


# ==================== PRODUCTS ====================

def get_product_by_id(db: Session, product_id: str) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).first()


def require_product(db: Session, product_id: str) -> Product:
    product = get_product_by_id(db, product_id)
    if not product:
        raise UnknownProductError(f"Product {product_id} does not exist")
    return product


def get_all_products(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    product_type: Optional[ProductType] = None,
) -> tuple[List[Product], int]:
    query = db.query(Product)

    if product_type:
        query = query.filter(Product.product_type == product_type)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Product.name.ilike(search_term),
                Product.sku.ilike(search_term),
                Product.id.ilike(search_term),
            )
        )

    total = query.count()
    products = query.order_by(Product.id).offset(skip).limit(limit).all()
    return products, total


def create_product(
    db: Session,
    name: str,
    price: Decimal,
    cost: Decimal,
    sku: Optional[str] = None,
    min_stock: Decimal = Decimal("0"),
    product_type: ProductType = ProductType.STANDARD,
    product_id: Optional[str] = None,
) -> Product:
    if product_id and get_product_by_id(db, product_id):
        raise ValidationFailure(f"Product {product_id} already exists")

    if sku and db.query(Product).filter(Product.sku == sku).first():
        raise ValidationFailure(f"Product with SKU {sku} already exists")

    product = Product(
        id=product_id or sequence_service.next_document_id(db, sequence_service.PRODUCT),
        name=name,
        sku=sku,
        price=money(price),
        cost=money(cost),
        min_stock=quantity(min_stock),
        product_type=product_type,
    )
    db.add(product)
    product = _commit(db, product, "product")
    logger.info(f"Product {product.id} - {product.name} created")
    return product


def update_product(db: Session, product_id: str, **fields) -> Optional[Product]:
    """Update price, cost, min_stock, name, sku or product_type. None values are skipped."""
    product = get_product_by_id(db, product_id)
    if not product:
        return None

    for field in ("name", "sku", "product_type"):
        if fields.get(field) is not None:
            setattr(product, field, fields[field])
    if fields.get("price") is not None:
        product.price = money(fields["price"])
    if fields.get("cost") is not None:
        product.cost = money(fields["cost"])
    if fields.get("min_stock") is not None:
        product.min_stock = quantity(fields["min_stock"])

    return _commit(db, product, "product")


# ==================== CUSTOMERS ====================

def get_customer_by_id(db: Session, customer_id: str) -> Optional[Customer]:
    return db.query(Customer).filter(Customer.id == customer_id).first()


def require_customer(db: Session, customer_id: str) -> Customer:
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        raise NotFoundError(f"Customer {customer_id} not found")
    return customer


def get_all_customers(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
) -> tuple[List[Customer], int]:
    query = db.query(Customer)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Customer.name.ilike(search_term),
                Customer.email.ilike(search_term),
                Customer.phone.ilike(search_term),
            )
        )

    total = query.count()
    customers = query.order_by(Customer.id).offset(skip).limit(limit).all()
    return customers, total


def create_customer(
    db: Session,
    name: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    customer_id: Optional[str] = None,
) -> Customer:
    if customer_id and get_customer_by_id(db, customer_id):
        raise ValidationFailure(f"Customer {customer_id} already exists")

    customer = Customer(
        id=customer_id or sequence_service.next_document_id(db, sequence_service.CUSTOMER),
        name=name,
        email=email,
        phone=phone,
    )
    db.add(customer)
    return _commit(db, customer, "customer")


# ==================== SUPPLIERS ====================

def get_supplier_by_id(db: Session, supplier_id: str) -> Optional[Supplier]:
    return db.query(Supplier).filter(Supplier.id == supplier_id).first()


def require_supplier(db: Session, supplier_id: str) -> Supplier:
    supplier = get_supplier_by_id(db, supplier_id)
    if not supplier:
        raise NotFoundError(f"Supplier {supplier_id} not found")
    return supplier


def get_all_suppliers(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
) -> tuple[List[Supplier], int]:
    query = db.query(Supplier)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Supplier.name.ilike(search_term),
                Supplier.contact_person.ilike(search_term),
                Supplier.email.ilike(search_term),
            )
        )

    total = query.count()
    suppliers = query.order_by(Supplier.id).offset(skip).limit(limit).all()
    return suppliers, total


def create_supplier(
    db: Session,
    name: str,
    contact_person: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    supplier_id: Optional[str] = None,
) -> Supplier:
    if supplier_id and get_supplier_by_id(db, supplier_id):
        raise ValidationFailure(f"Supplier {supplier_id} already exists")

    supplier = Supplier(
        id=supplier_id or sequence_service.next_document_id(db, sequence_service.SUPPLIER),
        name=name,
        contact_person=contact_person,
        email=email,
        phone=phone,
    )
    db.add(supplier)
    return _commit(db, supplier, "supplier")


# ==================== WAREHOUSES ====================

def get_warehouse_by_name(db: Session, name: str) -> Optional[Warehouse]:
    return db.query(Warehouse).filter(func.lower(Warehouse.name) == name.strip().lower()).first()


def require_warehouse(db: Session, name: Optional[str]) -> str:
    """Return the stored warehouse name, rejecting unknown ones."""
    if not name or not name.strip():
        raise ValidationFailure("Warehouse is required")
    warehouse = get_warehouse_by_name(db, name)
    if not warehouse:
        raise ValidationFailure(f"Unknown warehouse: {name}")
    return warehouse.name


def get_all_warehouses(db: Session) -> List[Warehouse]:
    return db.query(Warehouse).order_by(Warehouse.name).all()


def create_warehouse(db: Session, name: str) -> Warehouse:
    """Add a warehouse. Names are unique case-insensitively."""
    name = name.strip()
    if not name:
        raise ValidationFailure("Warehouse name is required")

    if get_warehouse_by_name(db, name):
        raise ValidationFailure(f"Warehouse {name} already exists")

    warehouse = Warehouse(
        id=sequence_service.next_document_id(db, sequence_service.WAREHOUSE),
        name=name,
    )
    db.add(warehouse)
    warehouse = _commit(db, warehouse, "warehouse")
    logger.info(f"Warehouse {name} created")
    return warehouse
