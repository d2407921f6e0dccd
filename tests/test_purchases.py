"""
Purchase Order Tests
====================

Receiving goods into stock, the receipt entry and supplier payments.
"""

import pytest
from decimal import Decimal

from erp_ledger.common.exceptions import AlreadyProcessedError, NotFoundError, ValidationFailure
from erp_ledger.models.inventory import MovementType
from erp_ledger.models.journal import JournalEntry
from erp_ledger.models.payment import PaymentStatus
from erp_ledger.models.purchase import PurchaseOrderStatus
from erp_ledger.services import purchase_service
from erp_ledger.services.stock_ledger import StockLedgerService

from .conftest import BRANCH, MAIN, ledger_totals, stock_of


def _po_data(supplier, *items, **extra):
    data = {
        "supplier_id": supplier.id,
        "warehouse": MAIN,
        "items": [{"product_id": p.id, "quantity": q, "cost": c} for p, q, c in items],
    }
    data.update(extra)
    return data


class TestCreatePurchaseOrder:

    def test_tax_from_rate(self, db, supplier, widget, gadget):
        po = purchase_service.create_purchase_order(
            db, _po_data(supplier, (widget, 10, 60), (gadget, 4, 25), tax_rate=10)
        )

        assert po.id == "PO001"
        assert po.status == PurchaseOrderStatus.DRAFT
        assert po.subtotal == Decimal("700")
        assert po.tax == Decimal("70")
        assert po.total == Decimal("770")
        assert po.supplier_name == supplier.name

    def test_cost_defaults_to_product_cost(self, db, supplier, widget):
        po = purchase_service.create_purchase_order(
            db, {"supplier_id": supplier.id, "warehouse": MAIN, "items": [{"product_id": widget.id, "quantity": 2}]}
        )
        assert po.items[0].cost == Decimal("60")

    def test_cannot_create_received(self, db, supplier, widget):
        with pytest.raises(ValidationFailure):
            purchase_service.create_purchase_order(
                db, _po_data(supplier, (widget, 1, 60), status=PurchaseOrderStatus.RECEIVED)
            )

    def test_zero_quantity(self, db, supplier, widget):
        with pytest.raises(ValidationFailure):
            purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 0, 60)))

    def test_unknown_supplier(self, db, widget):
        with pytest.raises(NotFoundError):
            purchase_service.create_purchase_order(
                db, {"supplier_id": "NCC404", "warehouse": MAIN, "items": [{"product_id": widget.id, "quantity": 1}]}
            )


class TestReceivePurchaseOrder:

    def test_receipt_moves_stock_and_posts_entry(self, db, supplier, widget, gadget):
        po = purchase_service.create_purchase_order(
            db, _po_data(supplier, (widget, 10, 60), (gadget, 4, 25), tax_rate=10, warehouse=BRANCH)
        )

        result = purchase_service.update_purchase_order_status(db, po.id, PurchaseOrderStatus.RECEIVED)

        assert result["purchase_order"].status == PurchaseOrderStatus.RECEIVED
        assert result["purchase_order"].received_date is not None
        assert stock_of(db, widget.id, BRANCH) == Decimal("10")
        assert stock_of(db, gadget.id, BRANCH) == Decimal("4")
        assert stock_of(db, widget.id, MAIN) == Decimal("0")

        assert [m.type for m in result["movements"]] == [MovementType.PURCHASE_RECEIPT] * 2
        assert all(m.to_warehouse == BRANCH and m.reference_id == po.id for m in result["movements"])

        lines = {line.account_code: (line.debit, line.credit) for line in result["journal_entry"].lines}
        assert lines == {
            "156": (Decimal("700"), Decimal("0")),
            "133": (Decimal("70"), Decimal("0")),
            "331": (Decimal("0"), Decimal("770")),
        }
        assert ledger_totals(db) == (Decimal("770"), Decimal("770"))

    def test_receiving_twice_is_rejected(self, db, supplier, widget):
        po = purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 5, 60)))
        purchase_service.update_purchase_order_status(db, po.id, PurchaseOrderStatus.RECEIVED)

        with pytest.raises(AlreadyProcessedError):
            purchase_service.update_purchase_order_status(db, po.id, PurchaseOrderStatus.RECEIVED)

        assert stock_of(db, widget.id, MAIN) == Decimal("5")
        assert db.query(JournalEntry).count() == 1

    def test_received_order_is_frozen(self, db, supplier, widget):
        po = purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 5, 60)))
        purchase_service.update_purchase_order_status(db, po.id, PurchaseOrderStatus.RECEIVED)

        with pytest.raises(ValidationFailure):
            purchase_service.update_purchase_order_status(db, po.id, PurchaseOrderStatus.DRAFT)

    def test_ordered_status_moves_nothing(self, db, supplier, widget):
        po = purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 5, 60)))

        result = purchase_service.update_purchase_order_status(db, po.id, PurchaseOrderStatus.ORDERED)

        assert result["purchase_order"].status == PurchaseOrderStatus.ORDERED
        assert result["movements"] == []
        assert result["journal_entry"] is None
        assert stock_of(db, widget.id, MAIN) == Decimal("0")

    def test_free_goods_move_stock_without_entry(self, db, supplier, widget):
        po = purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 3, 0)))

        result = purchase_service.update_purchase_order_status(db, po.id, PurchaseOrderStatus.RECEIVED)

        assert result["journal_entry"] is None
        assert stock_of(db, widget.id, MAIN) == Decimal("3")

    def test_receipt_keeps_movements_and_stock_in_step(self, db, supplier, widget):
        po = purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 8, 60)))
        purchase_service.update_purchase_order_status(db, po.id, PurchaseOrderStatus.RECEIVED)

        service = StockLedgerService(db)
        assert service.reconstruct_stock(widget.id, MAIN) == service.get_stock(widget.id, MAIN)


class TestSupplierPayments:

    def test_partial_then_full(self, db, supplier, widget):
        po = purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 10, 60)))
        purchase_service.update_purchase_order_status(db, po.id, PurchaseOrderStatus.RECEIVED)

        first = purchase_service.record_purchase_payment(db, po.id, Decimal("200"))
        assert first["purchase_order"].payment_status == PaymentStatus.PARTIALLY_PAID
        lines = {line.account_code: (line.debit, line.credit) for line in first["journal_entry"].lines}
        assert lines == {"331": (Decimal("200"), Decimal("0")), "111": (Decimal("0"), Decimal("200"))}

        second = purchase_service.record_purchase_payment(db, po.id, Decimal("400"))
        assert second["purchase_order"].payment_status == PaymentStatus.PAID
        assert second["purchase_order"].amount_paid == Decimal("600")

    def test_negative_amount(self, db, supplier, widget):
        po = purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 1, 60)))
        with pytest.raises(ValidationFailure):
            purchase_service.record_purchase_payment(db, po.id, Decimal("-5"))

    def test_listing_by_payment_status(self, db, supplier, widget):
        paid = purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 1, 60)))
        purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 2, 60)))
        purchase_service.record_purchase_payment(db, paid.id, Decimal("60"))

        rows, count = purchase_service.get_all_purchase_orders(db, payment_status=PaymentStatus.UNPAID)
        assert count == 1
        assert rows[0].id != paid.id


class TestDeletePurchaseOrder:

    def test_draft_is_deleted(self, db, supplier, widget):
        po = purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 2, 60)))

        assert purchase_service.delete_purchase_order(db, po.id) is True
        assert purchase_service.get_purchase_order_by_id(db, po.id) is None

    def test_received_order_is_kept(self, db, supplier, widget):
        po = purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 2, 60)))
        purchase_service.update_purchase_order_status(db, po.id, PurchaseOrderStatus.RECEIVED)

        with pytest.raises(ValidationFailure):
            purchase_service.delete_purchase_order(db, po.id)
        assert stock_of(db, widget.id, MAIN) == Decimal("2")

    def test_paid_draft_is_kept(self, db, supplier, widget):
        po = purchase_service.create_purchase_order(db, _po_data(supplier, (widget, 1, 60)))
        purchase_service.record_purchase_payment(db, po.id, Decimal("60"))

        with pytest.raises(ValidationFailure):
            purchase_service.delete_purchase_order(db, po.id)

    def test_unknown_order(self, db):
        assert purchase_service.delete_purchase_order(db, "PO404") is False
