"""
HTTP API Tests
==============

End-to-end requests through the FastAPI app: status codes, the error body
and the event payloads returned by the processors.
"""

import pytest
from decimal import Decimal

from .conftest import BRANCH, MAIN, put_stock

API = "/api/v1"


def _d(value):
    return Decimal(str(value))


@pytest.fixture
def stocked_widget(db, widget):
    put_stock(db, widget.id, MAIN, 10)
    return widget


class TestCatalogEndpoints:

    def test_create_and_fetch_product(self, client):
        response = client.post(f"{API}/catalog/products", json={"name": "Lamp", "price": 45, "cost": 20})
        assert response.status_code == 201
        product = response.json()
        assert product["id"] == "SP001"
        assert _d(product["price"]) == Decimal("45")

        response = client.get(f"{API}/catalog/products/SP001")
        assert response.status_code == 200
        assert response.json()["name"] == "Lamp"

    def test_update_product(self, client, widget):
        response = client.put(f"{API}/catalog/products/{widget.id}", json={"price": 120})
        assert response.status_code == 200
        assert _d(response.json()["price"]) == Decimal("120")
        assert _d(response.json()["cost"]) == Decimal("60")

    def test_missing_product(self, client):
        response = client.get(f"{API}/catalog/products/SP404")
        assert response.status_code == 404
        assert response.json()["success"] is False
        assert response.json()["message"] == "Product not found"

    def test_warehouses(self, client):
        response = client.get(f"{API}/catalog/warehouses")
        assert sorted(w["name"] for w in response.json()) == sorted([MAIN, BRANCH])

        duplicate = client.post(f"{API}/catalog/warehouses", json={"name": MAIN})
        assert duplicate.status_code == 400

    def test_customers_and_suppliers(self, client):
        assert client.post(f"{API}/catalog/customers", json={"name": "Le Thi C"}).json()["id"] == "KH001"
        assert client.post(f"{API}/catalog/suppliers", json={"name": "Parts Co"}).json()["id"] == "NCC001"
        assert client.get(f"{API}/catalog/customers").json()["count"] == 1


class TestOrderEndpoints:

    def test_order_lifecycle(self, client, customer, stocked_widget):
        response = client.post(f"{API}/orders", json={
            "customer_id": customer.id,
            "warehouse": MAIN,
            "tax_rate": 10,
            "items": [{"product_id": stocked_widget.id, "quantity": 2}],
        })
        assert response.status_code == 201
        order_id = response.json()["id"]
        assert response.json()["status"] == "Pending"

        response = client.post(f"{API}/orders/{order_id}/complete")
        assert response.status_code == 200
        event = response.json()
        assert event["success"] is True
        assert event["updated_order"]["status"] == "Completed"
        assert len(event["new_journal_entries"]) == 2
        assert [_d(s["stock"]) for s in event["updated_stock"]] == [Decimal("8")]
        assert event["new_movements"][0]["type"] == "SalesIssue"

        response = client.post(f"{API}/orders/{order_id}/payments", json={"amount": "220"})
        assert response.status_code == 200
        assert response.json()["updated_order"]["payment_status"] == "Paid"
        assert _d(response.json()["new_journal_entry"]["total_debit"]) == Decimal("220")

    def test_completing_twice_conflicts(self, client, customer, stocked_widget):
        order_id = client.post(f"{API}/orders", json={
            "customer_id": customer.id,
            "warehouse": MAIN,
            "items": [{"product_id": stocked_widget.id, "quantity": 1}],
        }).json()["id"]
        client.post(f"{API}/orders/{order_id}/complete")

        response = client.post(f"{API}/orders/{order_id}/complete")

        assert response.status_code == 409
        assert response.json()["error"] == "Conflict"

    def test_status_update(self, client, customer, stocked_widget):
        order_id = client.post(f"{API}/orders", json={
            "customer_id": customer.id,
            "warehouse": MAIN,
            "items": [{"product_id": stocked_widget.id, "quantity": 1}],
        }).json()["id"]

        response = client.patch(f"{API}/orders/{order_id}/status", json={"status": "Cancelled"})
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["updated_order"]["status"] == "Cancelled"

        assert client.post(f"{API}/orders/{order_id}/complete").status_code == 400
        response = client.patch(f"{API}/orders/{order_id}/status", json={"status": "Completed"})
        assert response.status_code == 400

    def test_completed_order_status_is_final(self, client, customer, stocked_widget):
        order_id = client.post(f"{API}/orders/pos", json={
            "customer_id": customer.id,
            "warehouse": MAIN,
            "items": [{"product_id": stocked_widget.id, "quantity": 1}],
        }).json()["updated_order"]["id"]

        response = client.patch(f"{API}/orders/{order_id}/status", json={"status": "Cancelled"})

        assert response.status_code == 409
        assert client.get(f"{API}/orders/{order_id}").json()["status"] == "Completed"

    def test_pos_shortage_is_a_bad_request(self, client, customer, stocked_widget):
        response = client.post(f"{API}/orders/pos", json={
            "customer_id": customer.id,
            "warehouse": MAIN,
            "items": [{"product_id": stocked_widget.id, "quantity": 11}],
        })

        assert response.status_code == 400
        assert "Insufficient stock" in response.json()["message"]
        assert client.get(f"{API}/orders").json()["count"] == 0

    def test_zero_quantity_is_rejected_by_validation(self, client, customer, widget):
        response = client.post(f"{API}/orders", json={
            "customer_id": customer.id,
            "warehouse": MAIN,
            "items": [{"product_id": widget.id, "quantity": 0}],
        })
        assert response.status_code == 422
        assert response.json()["message"] == "Invalid request"

    def test_missing_order(self, client):
        response = client.get(f"{API}/orders/DH404")
        assert response.status_code == 404
        assert "DH404" in response.json()["message"]

    def test_sales_return(self, client, customer, stocked_widget):
        order_id = client.post(f"{API}/orders/pos", json={
            "customer_id": customer.id,
            "warehouse": MAIN,
            "items": [{"product_id": stocked_widget.id, "quantity": 2}],
        }).json()["updated_order"]["id"]

        response = client.post(f"{API}/orders/{order_id}/returns", json={
            "items": [{"product_id": stocked_widget.id, "quantity": 1}],
            "pre_tax_refund": 100,
        })

        assert response.status_code == 201
        assert response.json()["new_return"]["id"] == "SR001"
        assert client.get(f"{API}/orders/returns", params={"order_id": order_id}).json()["count"] == 1


class TestPurchaseEndpoints:

    def test_receive_and_pay(self, client, supplier, widget):
        po_id = client.post(f"{API}/purchase-orders", json={
            "supplier_id": supplier.id,
            "warehouse": BRANCH,
            "items": [{"product_id": widget.id, "quantity": 5, "cost": 60}],
        }).json()["id"]

        response = client.patch(f"{API}/purchase-orders/{po_id}/status", json={"status": "Received"})
        assert response.status_code == 200
        assert response.json()["updated_po"]["status"] == "Received"
        assert _d(response.json()["new_journal_entry"]["total_credit"]) == Decimal("300")

        again = client.patch(f"{API}/purchase-orders/{po_id}/status", json={"status": "Received"})
        assert again.status_code == 409

        response = client.post(f"{API}/purchase-orders/{po_id}/payments", json={"amount": 100})
        assert response.json()["updated_po"]["payment_status"] == "PartiallyPaid"

        assert client.delete(f"{API}/purchase-orders/{po_id}").status_code == 400

    def test_delete_draft(self, client, supplier, widget):
        po_id = client.post(f"{API}/purchase-orders", json={
            "supplier_id": supplier.id,
            "warehouse": MAIN,
            "items": [{"product_id": widget.id, "quantity": 1, "cost": 60}],
        }).json()["id"]

        assert client.delete(f"{API}/purchase-orders/{po_id}").status_code == 204
        assert client.get(f"{API}/purchase-orders/{po_id}").status_code == 404
        assert client.delete(f"{API}/purchase-orders/{po_id}").status_code == 404


class TestInventoryEndpoints:

    def test_transfer_to_same_warehouse(self, client, stocked_widget):
        response = client.post(f"{API}/inventory/transfers", json={
            "from_warehouse": MAIN,
            "to_warehouse": MAIN,
            "items": [{"product_id": stocked_widget.id, "quantity": 1}],
        })
        assert response.status_code == 400

    def test_adjustment_then_reconcile(self, client, widget):
        response = client.post(f"{API}/inventory/adjustments", json={
            "warehouse": MAIN,
            "items": [{"product_id": widget.id, "actual_stock": 7}],
        })
        assert response.status_code == 201
        assert _d(response.json()["new_adjustment"]["items"][0]["difference"]) == Decimal("7")

        report = client.get(
            f"{API}/inventory/stock/reconcile", params={"product_id": widget.id, "warehouse": MAIN}
        ).json()
        assert report["consistent"] is True
        assert _d(report["stock"]) == Decimal("7")

    def test_movements_listing(self, client, stocked_widget):
        client.post(f"{API}/inventory/transfers", json={
            "from_warehouse": MAIN,
            "to_warehouse": BRANCH,
            "items": [{"product_id": stocked_widget.id, "quantity": 3}],
        })

        response = client.get(f"{API}/inventory/movements", params={"type": "TransferIn"})

        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert response.json()["data"][0]["to_warehouse"] == BRANCH


class TestJournalEndpoints:

    def _post(self, client, debit, credit):
        return client.post(f"{API}/journal-entries", json={
            "description": "Owner contribution",
            "lines": [
                {"account_id": "111", "debit": debit},
                {"account_id": "411", "credit": credit},
            ],
        })

    def test_manual_entry(self, client):
        response = self._post(client, 500, 500)
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["new_journal_entry"]["id"] == "JE-M001"
        assert _d(body["new_journal_entry"]["total_debit"]) == Decimal("500")

    def test_unbalanced_entry(self, client):
        response = self._post(client, 500, 400)
        assert response.status_code == 400
        assert "not balanced" in response.json()["message"]

    def test_reverse(self, client):
        entry_id = self._post(client, 500, 500).json()["new_journal_entry"]["id"]

        response = client.post(f"{API}/journal-entries/{entry_id}/reverse")

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["new_journal_entry"]["reversal_of_id"] == entry_id
        assert client.post(f"{API}/journal-entries/{entry_id}/reverse").status_code == 409


class TestProductionEndpoints:

    def test_bom_and_work_order(self, client, db, cabinet, steel, bolt):
        put_stock(db, steel.id, MAIN, 10)
        put_stock(db, bolt.id, MAIN, 10)

        bom = client.post(f"{API}/production/boms", json={
            "product_id": cabinet.id,
            "items": [{"product_id": steel.id, "quantity": 2}, {"product_id": bolt.id, "quantity": 4}],
        }).json()
        assert _d(bom["total_cost"]) == Decimal("24")

        work_order = client.post(f"{API}/production/work-orders", json={
            "bom_id": bom["id"], "quantity_to_produce": 2, "warehouse": MAIN,
        }).json()
        assert work_order["status"] == "Pending"

        requirements = client.get(f"{API}/production/work-orders/{work_order['id']}/requirements").json()
        assert requirements["feasible"] is True

        response = client.post(f"{API}/production/work-orders/{work_order['id']}/complete")
        assert response.status_code == 200
        assert response.json()["updated_work_order"]["status"] == "Completed"
        assert len(response.json()["new_movements"]) == 3

    def test_completed_status_via_patch(self, client, cabinet, steel):
        bom_id = client.post(f"{API}/production/boms", json={
            "product_id": cabinet.id, "items": [{"product_id": steel.id, "quantity": 1}],
        }).json()["id"]
        wo_id = client.post(f"{API}/production/work-orders", json={
            "bom_id": bom_id, "quantity_to_produce": 1, "warehouse": MAIN,
        }).json()["id"]

        response = client.patch(f"{API}/production/work-orders/{wo_id}/status", json={"status": "Completed"})
        assert response.status_code == 400


class TestReportEndpoints:

    def test_reports_after_sale(self, client, customer, stocked_widget):
        client.post(f"{API}/orders/pos", json={
            "customer_id": customer.id,
            "warehouse": MAIN,
            "items": [{"product_id": stocked_widget.id, "quantity": 1}],
        })

        trial = client.get(f"{API}/reports/trial-balance").json()
        assert trial["is_balanced"] is True

        pnl = client.get(f"{API}/reports/profit-and-loss", params={"period": "month"}).json()
        assert _d(pnl["gross_profit"]) == Decimal("40")

        ledger = client.get(f"{API}/reports/accounts/111/ledger").json()
        assert _d(ledger["closing_balance"]) == Decimal("100")

        summary = client.get(f"{API}/reports/summary").json()
        assert len(summary["daily_trend"]) == 30
        assert len(summary["recent_entries"]) == 2

    def test_unknown_period(self, client):
        response = client.get(f"{API}/reports/profit-and-loss", params={"period": "decade"})
        assert response.status_code == 400

    def test_ledger_of_unknown_account(self, client):
        assert client.get(f"{API}/reports/accounts/999/ledger").status_code == 404
