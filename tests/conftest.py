"""
Fixtures for ledger tests
=========================

Every test gets a fresh in-memory SQLite database with the default chart of
accounts, two warehouses and a small catalog.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from erp_ledger.core.database import Base, SessionLocal, engine
from erp_ledger.core.dependencies import get_db
from erp_ledger.main import app
from erp_ledger.models.catalog import ProductType
from erp_ledger.models.inventory import InventoryItem
from erp_ledger.models.journal import JournalEntryLine
from erp_ledger.services import account_service, catalog_service, sequence_service
from erp_ledger.services.stock_ledger import StockLedgerService

MAIN = "Main Warehouse"
BRANCH = "Branch Warehouse"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    account_service.seed_chart_of_accounts(session)
    sequence_service.init_sequences(session)
    session.commit()
    catalog_service.create_warehouse(session, MAIN)
    catalog_service.create_warehouse(session, BRANCH)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def customer(db):
    return catalog_service.create_customer(db, name="Nguyen Van A", email="a@example.com")


@pytest.fixture
def supplier(db):
    return catalog_service.create_supplier(db, name="Acme Supplies", contact_person="Tran B")


@pytest.fixture
def widget(db):
    """Sells at 100, costs 60."""
    return catalog_service.create_product(
        db, name="Widget", price=Decimal("100"), cost=Decimal("60"), sku="WID-1", min_stock=Decimal("2")
    )


@pytest.fixture
def gadget(db):
    return catalog_service.create_product(db, name="Gadget", price=Decimal("50"), cost=Decimal("30"), sku="GAD-1")


@pytest.fixture
def steel(db):
    return catalog_service.create_product(
        db, name="Steel sheet", price=Decimal("0"), cost=Decimal("10"), product_type=ProductType.RAW_MATERIAL
    )


@pytest.fixture
def bolt(db):
    return catalog_service.create_product(
        db, name="Bolt", price=Decimal("0"), cost=Decimal("1"), product_type=ProductType.RAW_MATERIAL
    )


@pytest.fixture
def cabinet(db):
    return catalog_service.create_product(
        db, name="Cabinet", price=Decimal("300"), cost=Decimal("0"), product_type=ProductType.FINISHED_GOOD
    )


def put_stock(db, product_id, warehouse, qty):
    """Set opening stock directly, without a document."""
    StockLedgerService(db).update_stock(product_id, warehouse, Decimal(str(qty)))
    db.commit()


def stock_of(db, product_id, warehouse):
    db.expire_all()
    row = db.query(InventoryItem).filter_by(product_id=product_id, warehouse=warehouse).first()
    return row.stock if row else Decimal("0")


def ledger_totals(db):
    """(sum of all debits, sum of all credits) across every posted line."""
    db.expire_all()
    lines = db.query(JournalEntryLine).all()
    return (
        sum((line.debit for line in lines), Decimal("0")),
        sum((line.credit for line in lines), Decimal("0")),
    )
