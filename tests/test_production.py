"""
Production Tests
================

Bills of materials, the work order lifecycle and material consumption on completion.
"""

import pytest
from decimal import Decimal

from erp_ledger.common.exceptions import (
    AlreadyProcessedError,
    InsufficientStockError,
    NotFoundError,
    ValidationFailure,
)
from erp_ledger.models.inventory import InventoryMovement, MovementType
from erp_ledger.models.journal import JournalEntry
from erp_ledger.models.production import DEFAULT_PRODUCTION_STEPS, WorkOrderStatus
from erp_ledger.services import production_service

from .conftest import MAIN, put_stock, stock_of


@pytest.fixture
def bom(db, cabinet, steel, bolt):
    """Per cabinet: 2 steel sheets with 5% waste, 4 bolts."""
    return production_service.save_bom(db, {
        "name": "Cabinet v1",
        "product_id": cabinet.id,
        "items": [
            {"product_id": steel.id, "quantity": 2, "waste": 5},
            {"product_id": bolt.id, "quantity": 4},
        ],
    })


@pytest.fixture
def work_order(db, bom):
    return production_service.create_work_order(db, {
        "bom_id": bom.id,
        "quantity_to_produce": 3,
        "warehouse": MAIN,
    })


class TestBillOfMaterials:

    def test_total_cost_includes_waste(self, db, bom, steel):
        assert bom.id == "BOM001"
        assert bom.total_cost == Decimal("25")
        assert [item.product_id for item in bom.items][0] == steel.id
        assert bom.items[0].cost == Decimal("10")

    def test_saving_with_id_replaces_lines(self, db, bom, cabinet, bolt):
        updated = production_service.save_bom(
            db,
            {"name": "Cabinet v2", "product_id": cabinet.id, "items": [{"product_id": bolt.id, "quantity": 10}]},
            bom_id=bom.id,
        )

        assert updated.id == bom.id
        assert updated.name == "Cabinet v2"
        assert len(updated.items) == 1
        assert updated.total_cost == Decimal("10")

    def test_product_cannot_be_its_own_material(self, db, cabinet):
        with pytest.raises(ValidationFailure):
            production_service.save_bom(
                db, {"product_id": cabinet.id, "items": [{"product_id": cabinet.id, "quantity": 1}]}
            )

    def test_waste_must_stay_below_hundred(self, db, cabinet, steel):
        with pytest.raises(ValidationFailure):
            production_service.save_bom(
                db, {"product_id": cabinet.id, "items": [{"product_id": steel.id, "quantity": 1, "waste": 100}]}
            )

    def test_unknown_bom_update(self, db, cabinet, steel):
        with pytest.raises(NotFoundError):
            production_service.save_bom(
                db, {"product_id": cabinet.id, "items": [{"product_id": steel.id, "quantity": 1}]}, bom_id="BOM404"
            )

    def test_bom_in_use_cannot_be_deleted(self, db, bom, work_order):
        with pytest.raises(ValidationFailure):
            production_service.delete_bom(db, bom.id)

    def test_delete_unused_bom(self, db, bom):
        assert production_service.delete_bom(db, bom.id) is True
        assert production_service.get_bom_by_id(db, bom.id) is None
        assert production_service.delete_bom(db, bom.id) is False


class TestWorkOrderLifecycle:

    def test_created_pending_with_default_steps(self, db, work_order, cabinet):
        assert work_order.id == "LSX001"
        assert work_order.status == WorkOrderStatus.PENDING
        assert work_order.product_id == cabinet.id
        assert work_order.estimated_cost == Decimal("75")
        assert [s.name for s in work_order.production_steps] == list(DEFAULT_PRODUCTION_STEPS)
        assert not any(s.completed for s in work_order.production_steps)

    def test_starting_ticks_first_step(self, db, work_order):
        started = production_service.update_work_order_status(db, work_order.id, WorkOrderStatus.IN_PROGRESS)

        assert started.status == WorkOrderStatus.IN_PROGRESS
        assert [s.completed for s in started.production_steps] == [True, False, False, False]

    def test_completed_status_needs_complete_operation(self, db, work_order):
        with pytest.raises(ValidationFailure):
            production_service.update_work_order_status(db, work_order.id, WorkOrderStatus.COMPLETED)

    def test_steps_can_be_replaced(self, db, work_order):
        updated = production_service.update_work_order_steps(
            db, work_order.id, [{"name": "Cut", "completed": True}, {"name": "Weld"}]
        )
        assert [(s.name, s.completed) for s in updated.production_steps] == [("Cut", True), ("Weld", False)]

    def test_bom_must_produce_requested_product(self, db, bom, widget):
        with pytest.raises(ValidationFailure):
            production_service.create_work_order(db, {
                "bom_id": bom.id, "product_id": widget.id, "quantity_to_produce": 1, "warehouse": MAIN,
            })

    def test_requirements_report_shortfall(self, db, work_order, steel, bolt):
        put_stock(db, steel.id, MAIN, 5)
        put_stock(db, bolt.id, MAIN, 20)

        report = production_service.work_order_requirements(db, work_order.id)

        by_product = {r["product_id"]: r for r in report["requirements"]}
        assert by_product[steel.id]["required_quantity"] == Decimal("6.3")
        assert by_product[steel.id]["shortfall"] == Decimal("1.3")
        assert by_product[bolt.id]["sufficient"] is True
        assert report["feasible"] is False


class TestCompleteWorkOrder:

    def test_consumes_materials_and_receives_goods(self, db, work_order, cabinet, steel, bolt):
        put_stock(db, steel.id, MAIN, 10)
        put_stock(db, bolt.id, MAIN, 20)

        result = production_service.complete_work_order(db, work_order.id)

        completed = result["work_order"]
        assert completed.status == WorkOrderStatus.COMPLETED
        assert completed.completion_date is not None
        assert completed.actual_cost == Decimal("75")
        assert all(s.completed for s in completed.production_steps)

        assert stock_of(db, steel.id, MAIN) == Decimal("3.7")
        assert stock_of(db, bolt.id, MAIN) == Decimal("8")
        assert stock_of(db, cabinet.id, MAIN) == Decimal("3")

        types = [m.type for m in result["movements"]]
        assert types == [MovementType.PRODUCTION_ISSUE, MovementType.PRODUCTION_ISSUE, MovementType.PRODUCTION_RECEIPT]
        assert all(m.reference_id == work_order.id for m in result["movements"])
        assert db.query(JournalEntry).count() == 0

    def test_actual_cost_override(self, db, work_order, steel, bolt):
        put_stock(db, steel.id, MAIN, 10)
        put_stock(db, bolt.id, MAIN, 20)

        result = production_service.complete_work_order(db, work_order.id, actual_cost=Decimal("80.50"))

        assert result["work_order"].actual_cost == Decimal("80.50")

    def test_shortage_names_the_material(self, db, work_order, cabinet, steel, bolt):
        put_stock(db, steel.id, MAIN, 6)
        put_stock(db, bolt.id, MAIN, 20)

        with pytest.raises(InsufficientStockError) as exc:
            production_service.complete_work_order(db, work_order.id)

        message = str(exc.value)
        assert 'Insufficient raw material "Steel sheet" in Main Warehouse' in message
        assert "short by 0.3" in message
        assert stock_of(db, bolt.id, MAIN) == Decimal("20")
        assert stock_of(db, cabinet.id, MAIN) == Decimal("0")
        assert db.query(InventoryMovement).count() == 0
        assert production_service.get_work_order_by_id(db, work_order.id).status == WorkOrderStatus.PENDING

    def test_completing_twice_is_rejected(self, db, work_order, steel, bolt):
        put_stock(db, steel.id, MAIN, 20)
        put_stock(db, bolt.id, MAIN, 40)
        production_service.complete_work_order(db, work_order.id)

        with pytest.raises(AlreadyProcessedError):
            production_service.complete_work_order(db, work_order.id)
        assert stock_of(db, bolt.id, MAIN) == Decimal("28")

    def test_completed_order_status_is_frozen(self, db, work_order, steel, bolt):
        put_stock(db, steel.id, MAIN, 20)
        put_stock(db, bolt.id, MAIN, 40)
        production_service.complete_work_order(db, work_order.id)

        with pytest.raises(AlreadyProcessedError):
            production_service.update_work_order_status(db, work_order.id, WorkOrderStatus.PENDING)

    def test_listing_by_status(self, db, work_order, bom):
        production_service.create_work_order(db, {"bom_id": bom.id, "quantity_to_produce": 1, "warehouse": MAIN})
        production_service.update_work_order_status(db, work_order.id, WorkOrderStatus.IN_PROGRESS)

        rows, count = production_service.get_all_work_orders(db, status=WorkOrderStatus.PENDING)
        assert count == 1
        assert rows[0].id == "LSX002"
