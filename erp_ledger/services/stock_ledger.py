from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session

from erp_ledger.common.exceptions import InsufficientStockError, UnknownProductError
from erp_ledger.core.config import settings
from erp_ledger.logger_config import logger
from erp_ledger.models.catalog import Product
from erp_ledger.models.inventory import InventoryItem, InventoryMovement, MovementType
from erp_ledger.services import sequence_service
from erp_ledger.utils.amounts import quantity
from erp_ledger.utils.filteration import apply_date_range


def aggregate_quantities(lines) -> Dict[str, Decimal]:
    """Total quantity per product_id, keeping first-seen order."""
    required: Dict[str, Decimal] = {}
    for line in lines:
        required[line.product_id] = required.get(line.product_id, quantity(0)) + quantity(line.quantity)
    return required


class StockLedgerService:
    """
    Stock rows per (product, warehouse) and the movement log that explains them.

    Nothing here commits: every write joins the caller's transaction so a
    document and all of its stock effects land together or not at all.
    """

    def __init__(self, db: Session):
        self.db = db

    # ================= STOCK ROWS ===================

    def _stock_row(self, product_id: str, warehouse: str, lock: bool = False) -> Optional[InventoryItem]:
        query = self.db.query(InventoryItem).filter(
            InventoryItem.product_id == product_id,
            InventoryItem.warehouse == warehouse,
        )
        if lock:
            query = query.with_for_update()
        return query.first()

    def get_stock(self, product_id: str, warehouse: str) -> Decimal:
        """Current stock; 0 when the pair has no row yet."""
        row = self._stock_row(product_id, warehouse)
        return quantity(row.stock) if row else quantity(0)

    def update_stock(self, product_id: str, warehouse: str, delta) -> Optional[InventoryItem]:
        """
        Apply delta to the (product, warehouse) row, creating it on first receipt.
        A negative delta against a missing row leaves stock untouched unless
        negative stock is allowed, in which case the row is created below zero.
        """
        delta = quantity(delta)
        row = self._stock_row(product_id, warehouse, lock=True)

        if row is None:
            if delta <= 0 and not settings.ALLOW_NEGATIVE_STOCK:
                if delta < 0:
                    raise InsufficientStockError(
                        f"Insufficient stock for product {product_id} in {warehouse}: "
                        f"requested {-delta}, available 0"
                    )
                return None
            row = InventoryItem(product_id=product_id, warehouse=warehouse, stock=delta)
            self.db.add(row)
            self.db.flush()
            logger.debug(f"Stock row created for {product_id} @ {warehouse}: {delta}")
            return row

        new_stock = quantity(row.stock) + delta
        if new_stock < 0 and not settings.ALLOW_NEGATIVE_STOCK:
            raise InsufficientStockError(
                f"Insufficient stock for product {product_id} in {warehouse}: "
                f"requested {-delta}, available {quantity(row.stock)}"
            )

        row.stock = new_stock
        self.db.flush()
        logger.debug(f"Stock for {product_id} @ {warehouse}: {delta:+} -> {new_stock}")
        return row

    def snapshot(self, product_ids: Optional[Iterable[str]] = None, warehouse: Optional[str] = None) -> List[InventoryItem]:
        query = self.db.query(InventoryItem)
        if product_ids is not None:
            query = query.filter(InventoryItem.product_id.in_(list(product_ids)))
        if warehouse:
            query = query.filter(InventoryItem.warehouse == warehouse)
        return query.order_by(InventoryItem.product_id, InventoryItem.warehouse).all()

    def low_stock_warning(self, product: Product, warehouse: str) -> Optional[dict]:
        if not settings.LOW_STOCK_WARNINGS:
            return None
        stock = self.get_stock(product.id, warehouse)
        min_stock = quantity(product.min_stock)
        if stock < min_stock:
            logger.warning(f"Low stock: {product.name} @ {warehouse} is {stock} (minimum {min_stock})")
            return {
                "product_id": product.id,
                "product_name": product.name,
                "warehouse": warehouse,
                "stock": stock,
                "min_stock": min_stock,
                "message": f'Stock of "{product.name}" in {warehouse} is below the minimum '
                           f"({stock} < {min_stock})",
            }
        return None

    def check_availability(self, requirements: Dict[str, Decimal], warehouse: str) -> None:
        """Raise for the first product whose aggregated requirement exceeds stock."""
        if settings.ALLOW_NEGATIVE_STOCK:
            return
        for product_id, required in requirements.items():
            available = self.get_stock(product_id, warehouse)
            if available < required:
                product = self.db.get(Product, product_id)
                name = product.name if product else product_id
                raise InsufficientStockError(
                    f'Insufficient stock for "{name}" in {warehouse}: '
                    f"required {required}, available {available}"
                )

    # ================= MOVEMENTS ===================

    def create_movement(
        self,
        movement_type: MovementType,
        product_id: str,
        delta,
        reference_id: str,
        warehouse: str,
        to_warehouse: Optional[str] = None,
        notes: Optional[str] = None,
        movement_date: Optional[date] = None,
    ) -> InventoryMovement:
        """
        Record a movement. The warehouse is the source for outflows and for
        transfer-ins (which name both sides); the destination is to_warehouse
        when given, otherwise warehouse, and only set for inflows.
        """
        product = self.db.get(Product, product_id)
        if not product:
            raise UnknownProductError(f"Product {product_id} does not exist")

        delta = quantity(delta)
        seq = sequence_service.next_sequence_value(self.db, sequence_service.MOVEMENT)
        movement = InventoryMovement(
            id=sequence_service.format_document_id(sequence_service.MOVEMENT, seq),
            seq=seq,
            date=movement_date or date.today(),
            product_id=product.id,
            product_name=product.name,
            type=movement_type,
            quantity_change=delta,
            from_warehouse=warehouse if (delta < 0 or to_warehouse) else None,
            to_warehouse=(to_warehouse or warehouse) if delta > 0 else None,
            reference_id=reference_id,
            notes=notes,
        )
        self.db.add(movement)
        self.db.flush()
        return movement

    def move(
        self,
        movement_type: MovementType,
        product_id: str,
        delta,
        reference_id: str,
        warehouse: str,
        to_warehouse: Optional[str] = None,
        notes: Optional[str] = None,
        movement_date: Optional[date] = None,
    ) -> InventoryMovement:
        """Update the affected stock row and log the matching movement."""
        delta = quantity(delta)
        target = to_warehouse if (delta > 0 and to_warehouse) else warehouse
        self.update_stock(product_id, target, delta)
        return self.create_movement(
            movement_type, product_id, delta, reference_id, warehouse,
            to_warehouse=to_warehouse, notes=notes, movement_date=movement_date,
        )

    def reconstruct_stock(self, product_id: str, warehouse: str) -> Decimal:
        """Stock implied by the movement log alone."""
        total = (
            self.db.query(func.coalesce(func.sum(InventoryMovement.quantity_change), 0))
            .filter(
                InventoryMovement.product_id == product_id,
                or_(
                    and_(InventoryMovement.quantity_change > 0, InventoryMovement.to_warehouse == warehouse),
                    and_(InventoryMovement.quantity_change < 0, InventoryMovement.from_warehouse == warehouse),
                ),
            )
            .scalar()
        )
        return quantity(total)

    # ================= LISTING ===================

    def get_all_movements(
        self,
        skip: int = 0,
        limit: int = 25,
        search: Optional[str] = None,
        product_id: Optional[str] = None,
        warehouse: Optional[str] = None,
        movement_type: Optional[MovementType] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Tuple[List[InventoryMovement], int, dict]:
        try:
            query = self.db.query(InventoryMovement)

            if product_id:
                query = query.filter(InventoryMovement.product_id == product_id)

            if warehouse:
                query = query.filter(
                    or_(
                        InventoryMovement.from_warehouse == warehouse,
                        InventoryMovement.to_warehouse == warehouse,
                    )
                )

            if movement_type:
                query = query.filter(InventoryMovement.type == movement_type)

            if search:
                query = query.filter(
                    or_(
                        InventoryMovement.reference_id.ilike(f"%{search}%"),
                        InventoryMovement.product_name.ilike(f"%{search}%"),
                        InventoryMovement.product_id.ilike(f"%{search}%"),
                    )
                )

            query = apply_date_range(query, InventoryMovement.date, start_date, end_date)

            total_count = query.count()

            totals_row = query.with_entities(
                func.coalesce(func.sum(case((InventoryMovement.quantity_change > 0, InventoryMovement.quantity_change), else_=0)), 0),
                func.coalesce(func.sum(case((InventoryMovement.quantity_change < 0, InventoryMovement.quantity_change), else_=0)), 0),
            ).first()

            totals = {
                "total_qty_in": quantity(totals_row[0]),
                "total_qty_out": -quantity(totals_row[1]),
            }

            rows = (
                query
                .order_by(InventoryMovement.seq.desc())
                .offset(skip)
                .limit(limit)
                .all()
            )

            return rows, total_count, totals

        except Exception:
            logger.exception("Error while fetching inventory movements")
            raise
