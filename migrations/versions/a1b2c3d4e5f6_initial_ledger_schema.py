"""initial ledger schema: accounts, journal, catalog, inventory, sales, purchasing, production

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from erp_ledger.services.account_service import DEFAULT_CHART_OF_ACCOUNTS, SYSTEM_ACCOUNT_CODES
from erp_ledger.services.sequence_service import KNOWN_PREFIXES


revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


account_type = sa.Enum("ASSET", "LIABILITY", "EQUITY", "REVENUE", "EXPENSE", name="accounttype")
period_status = sa.Enum("OPEN", "CLOSED", name="periodstatus")
product_type = sa.Enum("STANDARD", "FINISHED_GOOD", "RAW_MATERIAL", name="producttype")
movement_type = sa.Enum(
    "PURCHASE_RECEIPT",
    "SALES_ISSUE",
    "SALES_RETURN",
    "TRANSFER_OUT",
    "TRANSFER_IN",
    "ADJUSTMENT",
    "PRODUCTION_ISSUE",
    "PRODUCTION_RECEIPT",
    name="movementtype",
)
transfer_status = sa.Enum("COMPLETED", name="transferstatus")
order_status = sa.Enum("PENDING", "PROCESSING", "COMPLETED", "CANCELLED", name="orderstatus")
sales_return_status = sa.Enum("COMPLETED", name="salesreturnstatus")
payment_method = sa.Enum("CASH", "BANK_TRANSFER", "CARD", "COD", name="paymentmethod")
payment_status = sa.Enum("PAID", "PARTIALLY_PAID", "UNPAID", name="paymentstatus")
purchase_order_status = sa.Enum("DRAFT", "ORDERED", "RECEIVED", name="purchaseorderstatus")
work_order_status = sa.Enum("PENDING", "IN_PROGRESS", "COMPLETED", name="workorderstatus")


def _timestamps(updated: bool = True):
    columns = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True)]
    if updated:
        columns.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True)
        )
    return columns


def upgrade() -> None:
    # ---- ledger ----
    accounts = op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("type", account_type, nullable=False),
        sa.Column("is_system_account", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_accounts_code"), "accounts", ["code"], unique=True)

    op.create_table(
        "accounting_periods",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", period_status, nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "journal_entries",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("reference_id", sa.String(length=30), nullable=True),
        sa.Column("reversal_of_id", sa.String(length=20), nullable=True),
        *_timestamps(updated=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["reversal_of_id"], ["journal_entries.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reversal_of_id"),
    )
    op.create_index(op.f("ix_journal_entries_date"), "journal_entries", ["date"])
    op.create_index(op.f("ix_journal_entries_reference_id"), "journal_entries", ["reference_id"])
    op.create_index(op.f("ix_journal_entries_seq"), "journal_entries", ["seq"])

    op.create_table(
        "journal_entry_lines",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("journal_entry_id", sa.String(length=20), nullable=False),
        sa.Column("account_id", sa.String(length=20), nullable=False),
        sa.Column("account_code", sa.String(length=20), nullable=False),
        sa.Column("account_name", sa.String(length=150), nullable=False),
        sa.Column("debit", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("credit", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.ForeignKeyConstraint(["journal_entry_id"], ["journal_entries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_journal_entry_lines_journal_entry_id"), "journal_entry_lines", ["journal_entry_id"])
    op.create_index(op.f("ix_journal_entry_lines_account_id"), "journal_entry_lines", ["account_id"])

    document_sequences = op.create_table(
        "document_sequences",
        sa.Column("prefix", sa.String(length=20), nullable=False),
        sa.Column("last_value", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("prefix"),
    )

    # ---- catalog ----
    op.create_table(
        "products",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("sku", sa.String(length=50), nullable=True),
        sa.Column("min_stock", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("price", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("cost", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("product_type", product_type, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sku"),
    )

    op.create_table(
        "customers",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=150), nullable=True),
        sa.Column("phone", sa.String(length=30), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "suppliers",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("contact_person", sa.String(length=150), nullable=True),
        sa.Column("email", sa.String(length=150), nullable=True),
        sa.Column("phone", sa.String(length=30), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "warehouses",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    # ---- inventory ----
    op.create_table(
        "inventory_stock",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("product_id", sa.String(length=20), nullable=False),
        sa.Column("warehouse", sa.String(length=100), nullable=False),
        sa.Column("stock", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("product_id", "warehouse", name="uq_stock_product_warehouse"),
    )
    op.create_index(op.f("ix_inventory_stock_product_id"), "inventory_stock", ["product_id"])
    op.create_index(op.f("ix_inventory_stock_warehouse"), "inventory_stock", ["warehouse"])

    op.create_table(
        "inventory_movements",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("product_id", sa.String(length=20), nullable=False),
        sa.Column("product_name", sa.String(length=150), nullable=False),
        sa.Column("type", movement_type, nullable=False),
        sa.Column("quantity_change", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("from_warehouse", sa.String(length=100), nullable=True),
        sa.Column("to_warehouse", sa.String(length=100), nullable=True),
        sa.Column("reference_id", sa.String(length=30), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_inventory_movements_date"), "inventory_movements", ["date"])
    op.create_index(op.f("ix_inventory_movements_product_id"), "inventory_movements", ["product_id"])
    op.create_index(op.f("ix_inventory_movements_reference_id"), "inventory_movements", ["reference_id"])
    op.create_index(op.f("ix_inventory_movements_seq"), "inventory_movements", ["seq"])

    op.create_table(
        "inventory_adjustments",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("warehouse", sa.String(length=100), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "inventory_adjustment_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("adjustment_id", sa.String(length=20), nullable=False),
        sa.Column("product_id", sa.String(length=20), nullable=False),
        sa.Column("product_name", sa.String(length=150), nullable=False),
        sa.Column("system_stock", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("actual_stock", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("difference", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.ForeignKeyConstraint(["adjustment_id"], ["inventory_adjustments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "stock_transfers",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("from_warehouse", sa.String(length=100), nullable=False),
        sa.Column("to_warehouse", sa.String(length=100), nullable=False),
        sa.Column("status", transfer_status, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "stock_transfer_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("transfer_id", sa.String(length=20), nullable=False),
        sa.Column("product_id", sa.String(length=20), nullable=False),
        sa.Column("product_name", sa.String(length=150), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.ForeignKeyConstraint(["transfer_id"], ["stock_transfers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )

    # ---- sales ----
    op.create_table(
        "orders",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("customer_id", sa.String(length=20), nullable=False),
        sa.Column("customer_name", sa.String(length=150), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("subtotal", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("discount", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("tax", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("tax_rate", sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column("total", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("status", order_status, nullable=False),
        sa.Column("payment_method", payment_method, nullable=False),
        sa.Column("payment_status", payment_status, nullable=False),
        sa.Column("amount_paid", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("warehouse", sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_orders_customer_id"), "orders", ["customer_id"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("order_id", sa.String(length=20), nullable=False),
        sa.Column("product_id", sa.String(length=20), nullable=False),
        sa.Column("product_name", sa.String(length=150), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("price", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_order_items_order_id"), "order_items", ["order_id"])

    op.create_table(
        "sales_returns",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("original_order_id", sa.String(length=20), nullable=False),
        sa.Column("customer_id", sa.String(length=20), nullable=False),
        sa.Column("customer_name", sa.String(length=150), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("total_refund", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("status", sales_return_status, nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["original_order_id"], ["orders.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sales_returns_original_order_id"), "sales_returns", ["original_order_id"])

    op.create_table(
        "sales_return_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sales_return_id", sa.String(length=20), nullable=False),
        sa.Column("product_id", sa.String(length=20), nullable=False),
        sa.Column("product_name", sa.String(length=150), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("price", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.ForeignKeyConstraint(["sales_return_id"], ["sales_returns.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )

    # ---- purchasing ----
    op.create_table(
        "purchase_orders",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("supplier_id", sa.String(length=20), nullable=False),
        sa.Column("supplier_name", sa.String(length=150), nullable=False),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("received_date", sa.Date(), nullable=True),
        sa.Column("subtotal", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("tax", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("tax_rate", sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column("total", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("status", purchase_order_status, nullable=False),
        sa.Column("payment_status", payment_status, nullable=False),
        sa.Column("amount_paid", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("warehouse", sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_purchase_orders_supplier_id"), "purchase_orders", ["supplier_id"])

    op.create_table(
        "purchase_order_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("purchase_order_id", sa.String(length=20), nullable=False),
        sa.Column("product_id", sa.String(length=20), nullable=False),
        sa.Column("product_name", sa.String(length=150), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("cost", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.ForeignKeyConstraint(["purchase_order_id"], ["purchase_orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_purchase_order_items_purchase_order_id"), "purchase_order_items", ["purchase_order_id"])

    # ---- production ----
    op.create_table(
        "bills_of_materials",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("product_id", sa.String(length=20), nullable=False),
        sa.Column("total_cost", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("last_updated", sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "bill_of_materials_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("bom_id", sa.String(length=20), nullable=False),
        sa.Column("product_id", sa.String(length=20), nullable=False),
        sa.Column("product_name", sa.String(length=150), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("cost", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("waste", sa.Numeric(precision=5, scale=2), nullable=False),
        sa.ForeignKeyConstraint(["bom_id"], ["bills_of_materials.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "work_orders",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("product_id", sa.String(length=20), nullable=False),
        sa.Column("product_name", sa.String(length=150), nullable=False),
        sa.Column("quantity_to_produce", sa.Numeric(precision=15, scale=4), nullable=False),
        sa.Column("bom_id", sa.String(length=20), nullable=False),
        sa.Column("status", work_order_status, nullable=False),
        sa.Column("creation_date", sa.Date(), nullable=False),
        sa.Column("completion_date", sa.Date(), nullable=True),
        sa.Column("warehouse", sa.String(length=100), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("estimated_cost", sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column("actual_cost", sa.Numeric(precision=15, scale=2), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["bom_id"], ["bills_of_materials.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "production_steps",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("work_order_id", sa.String(length=20), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["work_order_id"], ["work_orders.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_production_steps_work_order_id"), "production_steps", ["work_order_id"])

    # default chart of accounts
    op.bulk_insert(
        accounts,
        [
            {
                "id": code,
                "code": code,
                "name": name,
                "type": account_type_value.name,
                "is_system_account": code in SYSTEM_ACCOUNT_CODES,
            }
            for code, name, account_type_value in DEFAULT_CHART_OF_ACCOUNTS
        ],
    )

    # one counter per document prefix, starting at zero
    op.bulk_insert(document_sequences, [{"prefix": prefix, "last_value": 0} for prefix in KNOWN_PREFIXES])


def downgrade() -> None:
    op.drop_index(op.f("ix_production_steps_work_order_id"), table_name="production_steps")
    op.drop_table("production_steps")
    op.drop_table("work_orders")
    op.drop_table("bill_of_materials_items")
    op.drop_table("bills_of_materials")
    op.drop_index(op.f("ix_purchase_order_items_purchase_order_id"), table_name="purchase_order_items")
    op.drop_table("purchase_order_items")
    op.drop_index(op.f("ix_purchase_orders_supplier_id"), table_name="purchase_orders")
    op.drop_table("purchase_orders")
    op.drop_table("sales_return_items")
    op.drop_index(op.f("ix_sales_returns_original_order_id"), table_name="sales_returns")
    op.drop_table("sales_returns")
    op.drop_index(op.f("ix_order_items_order_id"), table_name="order_items")
    op.drop_table("order_items")
    op.drop_index(op.f("ix_orders_customer_id"), table_name="orders")
    op.drop_table("orders")
    op.drop_table("stock_transfer_items")
    op.drop_table("stock_transfers")
    op.drop_table("inventory_adjustment_items")
    op.drop_table("inventory_adjustments")
    op.drop_index(op.f("ix_inventory_movements_seq"), table_name="inventory_movements")
    op.drop_index(op.f("ix_inventory_movements_reference_id"), table_name="inventory_movements")
    op.drop_index(op.f("ix_inventory_movements_product_id"), table_name="inventory_movements")
    op.drop_index(op.f("ix_inventory_movements_date"), table_name="inventory_movements")
    op.drop_table("inventory_movements")
    op.drop_index(op.f("ix_inventory_stock_warehouse"), table_name="inventory_stock")
    op.drop_index(op.f("ix_inventory_stock_product_id"), table_name="inventory_stock")
    op.drop_table("inventory_stock")
    op.drop_table("warehouses")
    op.drop_table("suppliers")
    op.drop_table("customers")
    op.drop_table("products")
    op.drop_table("document_sequences")
    op.drop_index(op.f("ix_journal_entry_lines_account_id"), table_name="journal_entry_lines")
    op.drop_index(op.f("ix_journal_entry_lines_journal_entry_id"), table_name="journal_entry_lines")
    op.drop_table("journal_entry_lines")
    op.drop_index(op.f("ix_journal_entries_seq"), table_name="journal_entries")
    op.drop_index(op.f("ix_journal_entries_reference_id"), table_name="journal_entries")
    op.drop_index(op.f("ix_journal_entries_date"), table_name="journal_entries")
    op.drop_table("journal_entries")
    op.drop_table("accounting_periods")
    op.drop_index(op.f("ix_accounts_code"), table_name="accounts")
    op.drop_table("accounts")

    for enum_type in (
        work_order_status,
        purchase_order_status,
        payment_status,
        payment_method,
        sales_return_status,
        order_status,
        transfer_status,
        movement_type,
        product_type,
        period_status,
        account_type,
    ):
        enum_type.drop(op.get_bind(), checkfirst=True)
