"""
Inventory document tests: physical-count adjustments and warehouse transfers.
"""

import pytest
from decimal import Decimal

from erp_ledger.common.exceptions import InsufficientStockError, UnknownProductError, ValidationFailure
from erp_ledger.models.inventory import InventoryAdjustment, InventoryMovement, MovementType, StockTransfer
from erp_ledger.models.journal import JournalEntry
from erp_ledger.services import inventory_service
from erp_ledger.services.stock_ledger import StockLedgerService

from .conftest import BRANCH, MAIN, put_stock, stock_of


class TestInventoryAdjustment:

    def test_count_below_system_stock(self, db, widget, gadget):
        put_stock(db, widget.id, MAIN, 50)
        put_stock(db, gadget.id, MAIN, 8)

        result = inventory_service.create_inventory_adjustment(
            db,
            MAIN,
            [{"product_id": widget.id, "actual_stock": 45}, {"product_id": gadget.id, "actual_stock": 8}],
            notes="Quarterly count",
        )

        adjustment = result["adjustment"]
        assert adjustment.id == "ADJ001"
        [item] = adjustment.items
        assert item.product_id == widget.id
        assert item.system_stock == Decimal("50")
        assert item.actual_stock == Decimal("45")
        assert item.difference == Decimal("-5")

        [movement] = result["movements"]
        assert movement.type == MovementType.ADJUSTMENT
        assert movement.quantity_change == Decimal("-5")
        assert movement.from_warehouse == MAIN
        assert stock_of(db, widget.id, MAIN) == Decimal("45")
        assert stock_of(db, gadget.id, MAIN) == Decimal("8")

    def test_count_creates_stock_for_new_pair(self, db, widget):
        result = inventory_service.create_inventory_adjustment(
            db, BRANCH, [{"product_id": widget.id, "actual_stock": 6}]
        )

        assert result["movements"][0].quantity_change == Decimal("6")
        assert result["movements"][0].to_warehouse == BRANCH
        assert stock_of(db, widget.id, BRANCH) == Decimal("6")

    def test_adjustments_never_touch_ledger(self, db, widget):
        put_stock(db, widget.id, MAIN, 10)
        inventory_service.create_inventory_adjustment(db, MAIN, [{"product_id": widget.id, "actual_stock": 7}])
        assert db.query(JournalEntry).count() == 0

    def test_nothing_to_adjust(self, db, widget):
        put_stock(db, widget.id, MAIN, 10)

        with pytest.raises(ValidationFailure):
            inventory_service.create_inventory_adjustment(db, MAIN, [{"product_id": widget.id, "actual_stock": 10}])

        assert db.query(InventoryAdjustment).count() == 0

    def test_duplicate_product(self, db, widget):
        with pytest.raises(ValidationFailure):
            inventory_service.create_inventory_adjustment(
                db,
                MAIN,
                [{"product_id": widget.id, "actual_stock": 1}, {"product_id": widget.id, "actual_stock": 2}],
            )

    def test_negative_count(self, db, widget):
        with pytest.raises(ValidationFailure):
            inventory_service.create_inventory_adjustment(db, MAIN, [{"product_id": widget.id, "actual_stock": -1}])

    def test_unknown_product_rolls_back_everything(self, db, widget):
        put_stock(db, widget.id, MAIN, 10)

        with pytest.raises(UnknownProductError):
            inventory_service.create_inventory_adjustment(
                db,
                MAIN,
                [{"product_id": widget.id, "actual_stock": 4}, {"product_id": "SP404", "actual_stock": 1}],
            )

        assert stock_of(db, widget.id, MAIN) == Decimal("10")
        assert db.query(InventoryMovement).count() == 0


class TestStockTransfer:

    def test_transfer_conserves_stock(self, db, widget, gadget):
        put_stock(db, widget.id, MAIN, 10)
        put_stock(db, gadget.id, MAIN, 4)
        put_stock(db, gadget.id, BRANCH, 1)

        result = inventory_service.create_stock_transfer(
            db,
            MAIN,
            BRANCH,
            [{"product_id": widget.id, "quantity": 3}, {"product_id": gadget.id, "quantity": 4}],
        )

        assert result["transfer"].id == "ST001"
        assert stock_of(db, widget.id, MAIN) == Decimal("7")
        assert stock_of(db, widget.id, BRANCH) == Decimal("3")
        assert stock_of(db, gadget.id, MAIN) == Decimal("0")
        assert stock_of(db, gadget.id, BRANCH) == Decimal("5")

        movements = result["movements"]
        assert [m.type for m in movements] == [
            MovementType.TRANSFER_OUT, MovementType.TRANSFER_IN,
            MovementType.TRANSFER_OUT, MovementType.TRANSFER_IN,
        ]
        assert sum(m.quantity_change for m in movements) == 0
        transfer_in = movements[1]
        assert (transfer_in.from_warehouse, transfer_in.to_warehouse) == (MAIN, BRANCH)

    def test_movements_reconcile_both_warehouses(self, db, widget):
        inventory_service.create_inventory_adjustment(db, MAIN, [{"product_id": widget.id, "actual_stock": 9}])
        inventory_service.create_stock_transfer(db, MAIN, BRANCH, [{"product_id": widget.id, "quantity": 4}])

        service = StockLedgerService(db)
        for warehouse in (MAIN, BRANCH):
            assert service.reconstruct_stock(widget.id, warehouse) == service.get_stock(widget.id, warehouse)

    def test_same_warehouse_is_rejected(self, db, widget):
        put_stock(db, widget.id, MAIN, 10)

        with pytest.raises(ValidationFailure):
            inventory_service.create_stock_transfer(db, MAIN, MAIN, [{"product_id": widget.id, "quantity": 1}])

    def test_insufficient_stock_rejects_whole_transfer(self, db, widget, gadget):
        put_stock(db, widget.id, MAIN, 10)
        put_stock(db, gadget.id, MAIN, 1)

        with pytest.raises(InsufficientStockError):
            inventory_service.create_stock_transfer(
                db,
                MAIN,
                BRANCH,
                [{"product_id": widget.id, "quantity": 5}, {"product_id": gadget.id, "quantity": 2}],
            )

        assert stock_of(db, widget.id, MAIN) == Decimal("10")
        assert stock_of(db, widget.id, BRANCH) == Decimal("0")
        assert db.query(StockTransfer).count() == 0

    def test_unknown_destination(self, db, widget):
        put_stock(db, widget.id, MAIN, 10)
        with pytest.raises(ValidationFailure):
            inventory_service.create_stock_transfer(db, MAIN, "Nowhere", [{"product_id": widget.id, "quantity": 1}])

    def test_listing(self, db, widget):
        put_stock(db, widget.id, MAIN, 10)
        inventory_service.create_stock_transfer(db, MAIN, BRANCH, [{"product_id": widget.id, "quantity": 1}])
        inventory_service.create_stock_transfer(db, MAIN, BRANCH, [{"product_id": widget.id, "quantity": 2}])

        rows, count = inventory_service.get_all_transfers(db)
        assert count == 2
        assert rows[0].id == "ST002"
