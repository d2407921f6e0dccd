# erp_ledger/services/purchase_service.py

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import List, Optional, Dict
from decimal import Decimal
from datetime import date

from erp_ledger.common.exceptions import AlreadyProcessedError, NotFoundError, ValidationFailure
from erp_ledger.models.inventory import MovementType
from erp_ledger.models.payment import PaymentStatus
from erp_ledger.models.purchase import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus
from erp_ledger.services import account_service, catalog_service, journal_service, sequence_service
from erp_ledger.services.stock_ledger import StockLedgerService
from erp_ledger.utils.amounts import ZERO, derive_payment_status, money, quantity, to_decimal
from erp_ledger.logger_config import logger


# ==================== HELPER FUNCTIONS ====================

def _lock_purchase_order(db: Session, po_id: str) -> PurchaseOrder:
    po = db.query(PurchaseOrder).filter(PurchaseOrder.id == po_id).with_for_update().first()
    if not po:
        logger.error(f"Purchase order not found: {po_id}")
        raise NotFoundError(f"Purchase order {po_id} not found")
    return po


# ==================== PURCHASE ORDER QUERIES ====================

def get_purchase_order_by_id(db: Session, po_id: str) -> Optional[PurchaseOrder]:
    po = db.query(PurchaseOrder).filter(PurchaseOrder.id == po_id).first()
    if not po:
        logger.warning(f"Purchase order not found: {po_id}")
    return po


def get_all_purchase_orders(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    supplier_id: Optional[str] = None,
    status: Optional[PurchaseOrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    search: Optional[str] = None,
) -> tuple[List[PurchaseOrder], int]:
    """Get all purchase orders with optional filtering."""
    query = db.query(PurchaseOrder)

    if supplier_id:
        query = query.filter(PurchaseOrder.supplier_id == supplier_id)
        logger.debug(f"Filtering by supplier_id: {supplier_id}")

    if status:
        query = query.filter(PurchaseOrder.status == status)

    if payment_status:
        query = query.filter(PurchaseOrder.payment_status == payment_status)
        logger.debug(f"Filtering by payment_status: {payment_status}")

    if search:
        search_term = f"%{search}%"
        query = query.filter(or_(PurchaseOrder.id.ilike(search_term), PurchaseOrder.supplier_name.ilike(search_term)))

    total = query.count()
    purchase_orders = (
        query.order_by(PurchaseOrder.order_date.desc(), PurchaseOrder.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )

    logger.info(f"Retrieved {len(purchase_orders)} purchase orders out of {total} total")
    return purchase_orders, total


# ==================== CREATE PURCHASE ORDER ====================

def create_purchase_order(db: Session, data: Dict) -> PurchaseOrder:
    """
    Create a Draft or Ordered purchase order. Stock and accounts are only
    touched when the order is received.
    """
    logger.info(f"Starting purchase order creation - Supplier: {data.get('supplier_id')}, Items: {len(data.get('items') or [])}")

    try:
        status = data.get("status") or PurchaseOrderStatus.DRAFT
        if status == PurchaseOrderStatus.RECEIVED:
            raise ValidationFailure("Create the purchase order first, then mark it received")

        supplier = catalog_service.require_supplier(db, data.get("supplier_id"))
        warehouse = catalog_service.require_warehouse(db, data.get("warehouse"))

        items = data.get("items") or []
        if not items:
            raise ValidationFailure("Purchase order must contain at least one item")

        po_items = []
        subtotal = ZERO
        for idx, item_data in enumerate(items):
            product = catalog_service.require_product(db, item_data.get("product_id"))
            qty = quantity(item_data.get("quantity"))
            cost = money(item_data.get("cost") if item_data.get("cost") is not None else product.cost)

            if qty <= 0:
                logger.error(f"Item {idx + 1}: Invalid quantity {qty}")
                raise ValidationFailure(f"Item {idx + 1}: quantity must be greater than 0")
            if cost < 0:
                raise ValidationFailure(f"Item {idx + 1}: cost cannot be negative")

            subtotal += money(cost * qty)
            po_items.append(PurchaseOrderItem(
                product_id=product.id,
                product_name=item_data.get("product_name") or product.name,
                quantity=qty,
                cost=cost,
            ))

        tax_rate = to_decimal(data.get("tax_rate") or 0)
        if tax_rate < 0:
            raise ValidationFailure("Tax rate cannot be negative")
        tax = money(subtotal * tax_rate / 100)

        po = PurchaseOrder(
            id=sequence_service.next_document_id(db, sequence_service.PURCHASE_ORDER),
            supplier_id=supplier.id,
            supplier_name=supplier.name,
            order_date=data.get("order_date") or date.today(),
            subtotal=subtotal,
            tax=tax,
            tax_rate=tax_rate,
            total=subtotal + tax,
            status=status,
            payment_status=PaymentStatus.UNPAID,
            amount_paid=ZERO,
            warehouse=warehouse,
        )
        po.items = po_items
        db.add(po)
        db.commit()
        db.refresh(po)

        logger.info(f"Purchase order {po.id} created: subtotal {subtotal}, tax {tax}, total {po.total}")
        return po

    except ValueError:
        db.rollback()
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error creating purchase order: {str(e)}")
        raise ValidationFailure("Failed to create purchase order")


# ==================== STATUS / RECEIPT ====================

def update_purchase_order_status(db: Session, po_id: str, status: PurchaseOrderStatus) -> Dict:
    """
    Move a purchase order between statuses. Draft/Ordered -> Received receives
    the goods: stock in at the PO warehouse, PurchaseReceipt movements, and
    Dr Inventory + Dr VAT receivable / Cr AP when there is something to book.
    """
    logger.info(f"Updating purchase order {po_id} status to {status.value}")

    try:
        po = _lock_purchase_order(db, po_id)
        movements = []
        entry = None
        ledger = StockLedgerService(db)

        if status == PurchaseOrderStatus.RECEIVED:
            if po.status == PurchaseOrderStatus.RECEIVED:
                raise AlreadyProcessedError(f"Purchase order {po_id} has already been received")

            received_date = date.today()
            for item in po.items:
                movements.append(ledger.move(
                    MovementType.PURCHASE_RECEIPT,
                    item.product_id,
                    quantity(item.quantity),
                    po.id,
                    po.warehouse,
                    movement_date=received_date,
                ))

            if money(po.subtotal) > 0:
                entry = journal_service.post_journal_entry(
                    db,
                    description=f"Goods received from purchase order {po.id}",
                    lines=[
                        journal_service.debit(db, account_service.INVENTORY, po.subtotal),
                        journal_service.debit(db, account_service.VAT_RECEIVABLE, po.tax),
                        journal_service.credit(db, account_service.ACCOUNTS_PAYABLE, po.total),
                    ],
                    reference_id=po.id,
                    entry_date=received_date,
                )

            po.received_date = received_date

        elif po.status == PurchaseOrderStatus.RECEIVED:
            raise ValidationFailure(f"Purchase order {po_id} was received and cannot change status")

        old_status = po.status
        po.status = status
        db.commit()
        db.refresh(po)
        logger.info(f"Purchase order {po_id}: {old_status.value} -> {status.value}")

        return {
            "purchase_order": po,
            "movements": movements,
            "stock": ledger.snapshot({item.product_id for item in po.items}) if movements else [],
            "journal_entry": entry,
        }

    except ValueError:
        db.rollback()
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error updating purchase order {po_id}: {str(e)}")
        raise ValidationFailure("Failed to update purchase order")


def delete_purchase_order(db: Session, po_id: str) -> bool:
    """Delete an unpaid draft. False when the purchase order does not exist."""
    po = get_purchase_order_by_id(db, po_id)
    if not po:
        return False

    if po.status != PurchaseOrderStatus.DRAFT:
        raise ValidationFailure(f"Only draft purchase orders can be deleted (purchase order {po_id} is {po.status.value})")
    if money(po.amount_paid) > 0:
        raise ValidationFailure(f"Purchase order {po_id} has payments and cannot be deleted")

    db.delete(po)
    try:
        db.commit()
        logger.info(f"Purchase order {po_id} deleted")
        return True
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Purchase order delete integrity error: {e}")
        raise ValidationFailure("Failed to delete purchase order")


# ==================== PAYMENTS ====================

def record_purchase_payment(db: Session, po_id: str, amount: Decimal) -> Dict:
    """Pay a supplier: Dr AP / Cr Cash. Overpayment is accepted."""
    logger.info(f"Recording payment of {amount} for purchase order {po_id}")

    try:
        amount = money(amount)
        if amount <= 0:
            raise ValidationFailure("Payment amount must be greater than 0")

        po = _lock_purchase_order(db, po_id)

        entry = journal_service.post_journal_entry(
            db,
            description=f"Payment for purchase order {po.id}",
            lines=[
                journal_service.debit(db, account_service.ACCOUNTS_PAYABLE, amount),
                journal_service.credit(db, account_service.CASH, amount),
            ],
            reference_id=po.id,
        )

        old_paid = money(po.amount_paid)
        po.amount_paid = old_paid + amount
        po.payment_status = derive_payment_status(po.amount_paid, po.total)

        db.commit()
        db.refresh(po)
        logger.info(
            f"Purchase order {po.id} paid: {old_paid} -> {po.amount_paid} of {po.total} "
            f"({po.payment_status.value})"
        )
        return {"purchase_order": po, "journal_entry": entry}

    except ValueError:
        db.rollback()
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error recording supplier payment: {str(e)}")
        raise ValidationFailure("Failed to record payment")
