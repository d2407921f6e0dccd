"""
Fill a freshly migrated database with demo data. Every document goes through
the services, so stock, movements and journal entries stay consistent.
"""
from decimal import Decimal
import random

from faker import Faker

from erp_ledger.core.database import SessionLocal
from erp_ledger.models.catalog import ProductType
from erp_ledger.models.payment import PaymentMethod
from erp_ledger.models.purchase import PurchaseOrderStatus
from erp_ledger.services import (
    account_service,
    catalog_service,
    order_service,
    production_service,
    purchase_service,
    sequence_service,
)
from erp_ledger.utils.amounts import money

fake = Faker()
WAREHOUSES = ["Main Warehouse", "Branch Warehouse"]


def run():
    db = SessionLocal()
    try:
        print("🔄 Seeding chart of accounts and sequences...")
        created = account_service.seed_chart_of_accounts(db)
        sequence_service.init_sequences(db)
        db.commit()
        print(f"✅ {created} accounts created")

        for name in WAREHOUSES:
            if not catalog_service.get_warehouse_by_name(db, name):
                catalog_service.create_warehouse(db, name)

        print("🔄 Creating suppliers, customers and products...")
        suppliers = [
            catalog_service.create_supplier(
                db,
                name=fake.company(),
                contact_person=fake.name(),
                email=fake.company_email(),
                phone="".join(filter(str.isdigit, fake.phone_number()))[:20],
            )
            for _ in range(random.randint(5, 8))
        ]
        customers = [
            catalog_service.create_customer(
                db,
                name=fake.name(),
                email=fake.email(),
                phone="".join(filter(str.isdigit, fake.phone_number()))[:20],
            )
            for _ in range(random.randint(10, 15))
        ]

        goods = []
        for _ in range(12):
            cost = random.uniform(20, 200)
            goods.append(catalog_service.create_product(
                db,
                name=fake.word().capitalize(),
                cost=money(cost),
                price=money(cost * random.uniform(1.2, 1.8)),
                min_stock=Decimal(random.randint(2, 10)),
            ))
        materials = [
            catalog_service.create_product(
                db,
                name=f"{fake.word().capitalize()} sheet",
                cost=money(random.uniform(2, 15)),
                price=Decimal("0"),
                product_type=ProductType.RAW_MATERIAL,
            )
            for _ in range(4)
        ]
        finished = catalog_service.create_product(
            db,
            name=f"{fake.word().capitalize()} assembly",
            cost=Decimal("0"),
            price=money(random.uniform(150, 300)),
            product_type=ProductType.FINISHED_GOOD,
        )
        print(f"✅ Seeded {len(suppliers)} suppliers, {len(customers)} customers, {len(goods) + len(materials) + 1} products")

        print("🔄 Receiving purchase orders...")
        received = 0
        for _ in range(10):
            lines = random.sample(goods + materials, k=random.randint(1, 4))
            po = purchase_service.create_purchase_order(db, {
                "supplier_id": random.choice(suppliers).id,
                "warehouse": WAREHOUSES[0],
                "status": PurchaseOrderStatus.ORDERED,
                "tax_rate": random.choice([0, 5, 10]),
                "items": [
                    {"product_id": p.id, "quantity": random.randint(20, 60), "cost": p.cost}
                    for p in lines
                ],
            })
            purchase_service.update_purchase_order_status(db, po.id, PurchaseOrderStatus.RECEIVED)
            if random.choice([True, False]):
                purchase_service.record_purchase_payment(db, po.id, po.total)
            received += 1
        print(f"✅ Received {received} purchase orders")

        print("🔄 Selling...")
        sold = 0
        for _ in range(20):
            product = random.choice(goods)
            qty = random.randint(1, 5)
            data = {
                "customer_id": random.choice(customers).id,
                "warehouse": WAREHOUSES[0],
                "payment_method": random.choice(list(PaymentMethod)),
                "tax_rate": 10,
                "items": [{"product_id": product.id, "quantity": qty}],
            }
            try:
                if random.random() < 0.3:
                    order_service.create_and_complete_order(db, data)
                else:
                    order = order_service.create_order(db, data)
                    order_service.complete_order(db, order.id)
                    if random.choice([True, False]):
                        order_service.record_order_payment(db, order.id, order.total)
            except ValueError as e:
                print(f"⚠️ Sale skipped: {e}")
                continue
            sold += 1
        print(f"✅ Seeded {sold} sales")

        print("🔄 Manufacturing...")
        bom = production_service.save_bom(db, {
            "name": f"{finished.name} recipe",
            "product_id": finished.id,
            "items": [
                {"product_id": m.id, "quantity": random.randint(1, 3), "waste": random.choice([0, 5])}
                for m in materials
            ],
        })
        work_order = production_service.create_work_order(db, {
            "bom_id": bom.id,
            "quantity_to_produce": 3,
            "warehouse": WAREHOUSES[0],
        })
        try:
            production_service.complete_work_order(db, work_order.id)
            print(f"✅ Completed work order {work_order.id}")
        except ValueError as e:
            print(f"⚠️ Work order {work_order.id} left open: {e}")

        print("🎉 All data seeded successfully!")

    except Exception as e:
        db.rollback()
        print(f"❌ SEEDING FAILED: {e}")
    finally:
        db.close()


if __name__ == "__main__":
    run()
