# erp_ledger/services/order_service.py

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func, or_
from typing import List, Optional, Dict
from decimal import Decimal
from datetime import date

from erp_ledger.common.exceptions import AlreadyProcessedError, NotFoundError, ValidationFailure
from erp_ledger.models.inventory import MovementType
from erp_ledger.models.payment import PaymentMethod, PaymentStatus
from erp_ledger.models.sales import (
    Order,
    OrderItem,
    OrderStatus,
    SalesReturn,
    SalesReturnItem,
    SalesReturnStatus,
)
from erp_ledger.services import account_service, catalog_service, journal_service, sequence_service
from erp_ledger.services.stock_ledger import StockLedgerService, aggregate_quantities
from erp_ledger.utils.amounts import ZERO, derive_payment_status, money, quantity, to_decimal
from erp_ledger.logger_config import logger


# ==================== HELPER FUNCTIONS ====================

def _lock_order(db: Session, order_id: str) -> Order:
    order = db.query(Order).filter(Order.id == order_id).with_for_update().first()
    if not order:
        logger.error(f"Order not found: {order_id}")
        raise NotFoundError(f"Order {order_id} not found")
    return order


def _build_items(db: Session, items: List[Dict]) -> List[OrderItem]:
    if not items:
        raise ValidationFailure("Order must contain at least one item")

    order_items = []
    for idx, item_data in enumerate(items):
        product = catalog_service.require_product(db, item_data.get("product_id"))
        qty = quantity(item_data.get("quantity"))
        price = money(item_data.get("price") if item_data.get("price") is not None else product.price)

        if qty <= 0:
            raise ValidationFailure(f"Item {idx + 1}: quantity must be greater than 0")
        if price < 0:
            raise ValidationFailure(f"Item {idx + 1}: price cannot be negative")

        order_items.append(OrderItem(
            product_id=product.id,
            product_name=item_data.get("product_name") or product.name,
            quantity=qty,
            price=price,
        ))
    return order_items


def _resolve_totals(order_items: List[OrderItem], data: Dict) -> Dict[str, Decimal]:
    """
    Fill in subtotal / tax / total that the caller left out and check that
    total == subtotal - discount + tax, which the revenue entry relies on.
    """
    subtotal = data.get("subtotal")
    subtotal = money(subtotal) if subtotal is not None else money(
        sum((to_decimal(i.price) * to_decimal(i.quantity) for i in order_items), ZERO)
    )
    discount = money(data.get("discount") or 0)
    tax_rate = to_decimal(data.get("tax_rate") or 0)

    if discount < 0 or discount > subtotal:
        raise ValidationFailure("Discount must be between 0 and the subtotal")
    if tax_rate < 0:
        raise ValidationFailure("Tax rate cannot be negative")

    tax = data.get("tax")
    tax = money(tax) if tax is not None else money((subtotal - discount) * tax_rate / 100)

    expected_total = subtotal - discount + tax
    total = data.get("total")
    total = money(total) if total is not None else expected_total
    if total != expected_total:
        raise ValidationFailure(
            f"Order total {total} does not match subtotal - discount + tax ({expected_total})"
        )

    return {"subtotal": subtotal, "discount": discount, "tax": tax, "tax_rate": tax_rate, "total": total}


def _new_order(db: Session, data: Dict, status: OrderStatus) -> Order:
    customer = catalog_service.require_customer(db, data.get("customer_id"))
    warehouse = catalog_service.require_warehouse(db, data.get("warehouse"))
    order_items = _build_items(db, data.get("items") or [])
    totals = _resolve_totals(order_items, data)

    order = Order(
        id=sequence_service.next_document_id(db, sequence_service.ORDER),
        customer_id=customer.id,
        customer_name=data.get("customer_name") or customer.name,
        date=data.get("date") or date.today(),
        status=status,
        payment_method=data.get("payment_method") or PaymentMethod.CASH,
        payment_status=PaymentStatus.UNPAID,
        amount_paid=ZERO,
        warehouse=warehouse,
        **totals,
    )
    order.items = order_items
    return order


def _issue_stock(ledger: StockLedgerService, db: Session, order: Order, movement_date: date):
    """Decrement stock for every line; returns (movements, cogs, last low-stock warning)."""
    movements = []
    cogs = ZERO
    warning = None

    for item in order.items:
        product = catalog_service.require_product(db, item.product_id)
        qty = quantity(item.quantity)
        cogs += money(to_decimal(product.cost) * qty)

        movements.append(ledger.move(
            MovementType.SALES_ISSUE,
            item.product_id,
            -qty,
            order.id,
            order.warehouse,
            movement_date=movement_date,
        ))
        warning = ledger.low_stock_warning(product, order.warehouse) or warning

    return movements, cogs, warning


def _post_sale_entries(db: Session, order: Order, debit_code: str, entry_date: date, cogs: Decimal) -> List:
    entries = []

    if money(order.total) > 0:
        entries.append(journal_service.post_journal_entry(
            db,
            description=f"Revenue recognition for order {order.id}",
            lines=[
                journal_service.debit(db, debit_code, order.total),
                journal_service.credit(db, account_service.SALES_REVENUE, money(order.subtotal) - money(order.discount)),
                journal_service.credit(db, account_service.VAT_PAYABLE, order.tax),
            ],
            reference_id=order.id,
            entry_date=entry_date,
        ))

    if cogs > 0:
        entries.append(journal_service.post_journal_entry(
            db,
            description=f"COGS recognition for order {order.id}",
            lines=[
                journal_service.debit(db, account_service.COST_OF_GOODS_SOLD, cogs),
                journal_service.credit(db, account_service.INVENTORY, cogs),
            ],
            reference_id=order.id,
            entry_date=entry_date,
        ))

    return entries


# ==================== ORDER QUERIES ====================

def get_order_by_id(db: Session, order_id: str) -> Optional[Order]:
    return db.query(Order).filter(Order.id == order_id).first()


def get_all_orders(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    status: Optional[OrderStatus] = None,
    customer_id: Optional[str] = None,
) -> tuple[List[Order], int]:
    query = db.query(Order)

    if status:
        query = query.filter(Order.status == status)

    if customer_id:
        query = query.filter(Order.customer_id == customer_id)

    if search:
        search_term = f"%{search}%"
        query = query.filter(or_(Order.id.ilike(search_term), Order.customer_name.ilike(search_term)))

    total = query.count()
    orders = query.order_by(Order.date.desc(), Order.id.desc()).offset(skip).limit(limit).all()
    return orders, total


# ==================== CREATE / COMPLETE ORDER ====================

def create_order(db: Session, data: Dict) -> Order:
    """Create a Pending, Unpaid order. Nothing moves until it is completed."""
    logger.info(f"Creating order for customer {data.get('customer_id')}")

    try:
        status = data.get("status") or OrderStatus.PENDING
        if status not in (OrderStatus.PENDING, OrderStatus.PROCESSING):
            raise ValidationFailure("New orders must be Pending or Processing")

        order = _new_order(db, data, status)
        db.add(order)
        db.commit()
        db.refresh(order)
        logger.info(f"Order {order.id} created, total {order.total}")
        return order

    except ValueError:
        db.rollback()
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error creating order: {str(e)}")
        raise ValidationFailure("Failed to create order")


def complete_order(db: Session, order_id: str) -> Dict:
    """
    Ship an order on credit.

    Process:
        1. Lock the order; reject completed ones
        2. Check stock for every product (aggregated over lines)
        3. Decrement stock, log SalesIssue movements, accumulate COGS
        4. Post revenue (Dr AR) and COGS entries
    """
    logger.info(f"Completing order {order_id}")

    try:
        order = _lock_order(db, order_id)
        if order.status == OrderStatus.COMPLETED:
            raise AlreadyProcessedError(f"Order {order_id} has already been completed")
        if order.status == OrderStatus.CANCELLED:
            raise ValidationFailure(f"Order {order_id} is cancelled")

        ledger = StockLedgerService(db)
        ledger.check_availability(aggregate_quantities(order.items), order.warehouse)

        today = date.today()
        movements, cogs, warning = _issue_stock(ledger, db, order, today)
        order.status = OrderStatus.COMPLETED
        entries = _post_sale_entries(db, order, account_service.ACCOUNTS_RECEIVABLE, today, cogs)

        db.commit()
        db.refresh(order)
        logger.info(f"Order {order_id} completed: {len(movements)} movements, COGS {cogs}")

        return {
            "order": order,
            "journal_entries": entries,
            "stock": ledger.snapshot({item.product_id for item in order.items}),
            "movements": movements,
            "stock_warning": warning,
        }

    except ValueError as ve:
        db.rollback()
        logger.warning(f"Order {order_id} not completed: {str(ve)}")
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error completing order {order_id}: {str(e)}")
        raise ValidationFailure("Failed to complete order")


def update_order_status(db: Session, order_id: str, status: OrderStatus) -> Order:
    """Move an open order between Pending, Processing and Cancelled."""
    order = _lock_order(db, order_id)

    if status == OrderStatus.COMPLETED:
        db.rollback()
        raise ValidationFailure("Use the complete operation to finish an order")
    if order.status == OrderStatus.COMPLETED:
        db.rollback()
        raise AlreadyProcessedError(f"Order {order_id} has already been completed")

    previous = order.status
    order.status = status
    db.commit()
    db.refresh(order)
    logger.info(f"Order {order_id} status {previous.value} -> {status.value}")
    return order


def create_and_complete_order(db: Session, data: Dict) -> Dict:
    """
    Point-of-sale path: create the order already Completed and Paid.
    Stock is checked for every line before anything is written, so a short
    line rejects the whole order.
    """
    logger.info(f"Point-of-sale order for customer {data.get('customer_id')}")

    try:
        order = _new_order(db, data, OrderStatus.COMPLETED)

        ledger = StockLedgerService(db)
        ledger.check_availability(aggregate_quantities(order.items), order.warehouse)

        order.amount_paid = order.total
        order.payment_status = derive_payment_status(order.total, order.total)
        db.add(order)
        db.flush()

        movements, cogs, warning = _issue_stock(ledger, db, order, order.date)
        entries = _post_sale_entries(db, order, account_service.CASH, order.date, cogs)

        db.commit()
        db.refresh(order)
        logger.info(f"Point-of-sale order {order.id} completed, total {order.total}")

        return {
            "order": order,
            "journal_entries": entries,
            "stock": ledger.snapshot({item.product_id for item in order.items}),
            "movements": movements,
            "stock_warning": warning,
        }

    except ValueError as ve:
        db.rollback()
        logger.warning(f"Point-of-sale order rejected: {str(ve)}")
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error on point-of-sale order: {str(e)}")
        raise ValidationFailure("Failed to create order")


# ==================== PAYMENTS ====================

def record_order_payment(
    db: Session,
    order_id: str,
    amount: Decimal,
    method: Optional[PaymentMethod] = None,
) -> Dict:
    """Collect a customer payment: Dr Cash / Cr AR. Overpayment is accepted."""
    logger.info(f"Recording payment of {amount} for order {order_id}")

    try:
        amount = money(amount)
        if amount <= 0:
            raise ValidationFailure("Payment amount must be greater than 0")

        order = _lock_order(db, order_id)

        entry = journal_service.post_journal_entry(
            db,
            description=f"Payment for order {order.id}",
            lines=[
                journal_service.debit(db, account_service.CASH, amount),
                journal_service.credit(db, account_service.ACCOUNTS_RECEIVABLE, amount),
            ],
            reference_id=order.id,
        )

        old_paid = money(order.amount_paid)
        order.amount_paid = old_paid + amount
        order.payment_status = derive_payment_status(order.amount_paid, order.total)
        if method is not None:
            order.payment_method = method

        db.commit()
        db.refresh(order)
        logger.info(
            f"Order {order.id} paid: {old_paid} -> {order.amount_paid} of {order.total} "
            f"({order.payment_status.value})"
        )
        return {"order": order, "journal_entry": entry}

    except ValueError:
        db.rollback()
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error recording payment: {str(e)}")
        raise ValidationFailure("Failed to record payment")


# ==================== SALES RETURNS ====================

def _returned_quantities(db: Session, order_id: str) -> Dict[str, Decimal]:
    rows = (
        db.query(SalesReturnItem.product_id, func.coalesce(func.sum(SalesReturnItem.quantity), 0))
        .join(SalesReturn, SalesReturnItem.sales_return_id == SalesReturn.id)
        .filter(SalesReturn.original_order_id == order_id)
        .group_by(SalesReturnItem.product_id)
        .all()
    )
    return {product_id: quantity(qty) for product_id, qty in rows}


def create_sales_return(
    db: Session,
    order_id: str,
    items: List[Dict],
    pre_tax_refund: Decimal,
    return_date: Optional[date] = None,
) -> Dict:
    """
    Take goods back on a completed order and refund in cash.
    Refund = pre-tax amount + the order's tax rate applied to it.
    """
    logger.info(f"Creating sales return for order {order_id}")

    try:
        order = _lock_order(db, order_id)
        if order.status != OrderStatus.COMPLETED:
            raise ValidationFailure(f"Only completed orders can be returned (order {order_id} is {order.status.value})")

        if not items:
            raise ValidationFailure("Return must contain at least one item")

        pre_tax = money(pre_tax_refund)
        if pre_tax <= 0:
            raise ValidationFailure("Refund amount must be greater than 0")

        sold = aggregate_quantities(order.items)
        # a product sold on several lines is refunded at its first line's price
        prices = {}
        for item in order.items:
            prices.setdefault(item.product_id, item.price)
        already_returned = _returned_quantities(db, order.id)
        requested = {}

        return_items = []
        for idx, item_data in enumerate(items):
            product_id = item_data.get("product_id")
            qty = quantity(item_data.get("quantity"))
            if product_id not in sold:
                raise ValidationFailure(f"Product {product_id} is not part of order {order.id}")
            if qty <= 0:
                raise ValidationFailure(f"Item {idx + 1}: quantity must be greater than 0")

            requested[product_id] = requested.get(product_id, quantity(0)) + qty
            returnable = sold[product_id] - already_returned.get(product_id, quantity(0))
            if requested[product_id] > returnable:
                raise ValidationFailure(
                    f"Cannot return {requested[product_id]} of product {product_id}; only {returnable} returnable"
                )

            product = catalog_service.require_product(db, product_id)
            return_items.append(SalesReturnItem(
                product_id=product_id,
                product_name=product.name,
                quantity=qty,
                price=prices[product_id],
            ))

        tax_refund = money(pre_tax * to_decimal(order.tax_rate) / 100)
        total_refund = pre_tax + tax_refund
        return_date = return_date or date.today()

        sales_return = SalesReturn(
            id=sequence_service.next_document_id(db, sequence_service.SALES_RETURN),
            original_order_id=order.id,
            customer_id=order.customer_id,
            customer_name=order.customer_name,
            date=return_date,
            total_refund=total_refund,
            status=SalesReturnStatus.COMPLETED,
        )
        sales_return.items = return_items
        db.add(sales_return)
        db.flush()

        ledger = StockLedgerService(db)
        movements = [
            ledger.move(
                MovementType.SALES_RETURN,
                item.product_id,
                quantity(item.quantity),
                sales_return.id,
                order.warehouse,
                movement_date=return_date,
            )
            for item in return_items
        ]

        entry = journal_service.post_journal_entry(
            db,
            description=f"Refund for returned goods on order {order.id}",
            lines=[
                journal_service.debit(db, account_service.SALES_REVENUE, pre_tax),
                journal_service.debit(db, account_service.VAT_PAYABLE, tax_refund),
                journal_service.credit(db, account_service.CASH, total_refund),
            ],
            reference_id=sales_return.id,
            entry_date=return_date,
        )

        db.commit()
        db.refresh(sales_return)
        logger.info(f"Sales return {sales_return.id} recorded, refund {total_refund}")

        return {
            "sales_return": sales_return,
            "journal_entry": entry,
            "stock": ledger.snapshot({item.product_id for item in return_items}),
            "movements": movements,
        }

    except ValueError:
        db.rollback()
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error creating sales return: {str(e)}")
        raise ValidationFailure("Failed to create sales return")


def get_all_sales_returns(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    order_id: Optional[str] = None,
) -> tuple[List[SalesReturn], int]:
    query = db.query(SalesReturn)
    if order_id:
        query = query.filter(SalesReturn.original_order_id == order_id)

    total = query.count()
    returns = query.order_by(SalesReturn.date.desc(), SalesReturn.id.desc()).offset(skip).limit(limit).all()
    return returns, total
