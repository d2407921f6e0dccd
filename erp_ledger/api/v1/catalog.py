from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from erp_ledger.common.exceptions import error_status
from erp_ledger.core.dependencies import Pagination, get_db
from erp_ledger.models.catalog import ProductType
from erp_ledger.schemas.catalog import (
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    SupplierCreate,
    SupplierListResponse,
    SupplierResponse,
    WarehouseCreate,
    WarehouseResponse,
)
from erp_ledger.services import catalog_service

router = APIRouter()


# ==================== PRODUCTS ====================

@router.get("/products", response_model=ProductListResponse)
def list_products(
    pagination: Pagination = Depends(),
    product_type: Optional[ProductType] = Query(None),
    db: Session = Depends(get_db),
):
    products, total = catalog_service.get_all_products(
        db, skip=pagination.skip, limit=pagination.limit, search=pagination.search, product_type=product_type
    )
    return ProductListResponse(data=products, count=total)


@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, db: Session = Depends(get_db)):
    product = catalog_service.get_product_by_id(db, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(data: ProductCreate, db: Session = Depends(get_db)):
    try:
        return catalog_service.create_product(
            db,
            name=data.name,
            price=data.price,
            cost=data.cost,
            sku=data.sku,
            min_stock=data.min_stock,
            product_type=data.product_type,
            product_id=data.id,
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(product_id: str, data: ProductUpdate, db: Session = Depends(get_db)):
    try:
        product = catalog_service.update_product(db, product_id, **data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))

    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


# ==================== CUSTOMERS ====================

@router.get("/customers", response_model=CustomerListResponse)
def list_customers(pagination: Pagination = Depends(), db: Session = Depends(get_db)):
    customers, total = catalog_service.get_all_customers(
        db, skip=pagination.skip, limit=pagination.limit, search=pagination.search
    )
    return CustomerListResponse(data=customers, count=total)


@router.post("/customers", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(data: CustomerCreate, db: Session = Depends(get_db)):
    try:
        return catalog_service.create_customer(
            db, name=data.name, email=data.email, phone=data.phone, customer_id=data.id
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


# ==================== SUPPLIERS ====================

@router.get("/suppliers", response_model=SupplierListResponse)
def list_suppliers(pagination: Pagination = Depends(), db: Session = Depends(get_db)):
    suppliers, total = catalog_service.get_all_suppliers(
        db, skip=pagination.skip, limit=pagination.limit, search=pagination.search
    )
    return SupplierListResponse(data=suppliers, count=total)


@router.post("/suppliers", response_model=SupplierResponse, status_code=status.HTTP_201_CREATED)
def create_supplier(data: SupplierCreate, db: Session = Depends(get_db)):
    try:
        return catalog_service.create_supplier(
            db,
            name=data.name,
            contact_person=data.contact_person,
            email=data.email,
            phone=data.phone,
            supplier_id=data.id,
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


# ==================== WAREHOUSES ====================

@router.get("/warehouses", response_model=List[WarehouseResponse])
def list_warehouses(db: Session = Depends(get_db)):
    return catalog_service.get_all_warehouses(db)


@router.post("/warehouses", response_model=WarehouseResponse, status_code=status.HTTP_201_CREATED)
def create_warehouse(data: WarehouseCreate, db: Session = Depends(get_db)):
    try:
        return catalog_service.create_warehouse(db, data.name)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
