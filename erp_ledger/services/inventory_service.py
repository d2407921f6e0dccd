from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional, Dict
from datetime import date

from erp_ledger.common.exceptions import ValidationFailure
from erp_ledger.models.inventory import (
    InventoryAdjustment,
    InventoryAdjustmentItem,
    MovementType,
    StockTransfer,
    StockTransferItem,
    TransferStatus,
)
from erp_ledger.services import catalog_service, sequence_service
from erp_ledger.services.stock_ledger import StockLedgerService, aggregate_quantities
from erp_ledger.utils.amounts import quantity
from erp_ledger.logger_config import logger


# ==================== ADJUSTMENTS ====================

def create_inventory_adjustment(
    db: Session,
    warehouse: str,
    items: List[Dict],
    notes: Optional[str] = None,
    adjustment_date: Optional[date] = None,
) -> Dict:
    """
    Book a physical count. For each {product_id, actual_stock} the system stock
    is read, and only items whose count differs are kept and moved.
    """
    logger.info(f"Creating inventory adjustment for {warehouse}, {len(items)} counted items")

    try:
        warehouse = catalog_service.require_warehouse(db, warehouse)
        ledger = StockLedgerService(db)

        seen = set()
        adjustment_items = []
        for idx, item_data in enumerate(items):
            product = catalog_service.require_product(db, item_data.get("product_id"))
            if product.id in seen:
                raise ValidationFailure(f"Product {product.id} is counted more than once")
            seen.add(product.id)

            actual = quantity(item_data.get("actual_stock"))
            if actual < 0:
                raise ValidationFailure(f"Item {idx + 1}: counted stock cannot be negative")

            system = ledger.get_stock(product.id, warehouse)
            difference = actual - system
            if difference == 0:
                continue

            adjustment_items.append(InventoryAdjustmentItem(
                product_id=product.id,
                product_name=product.name,
                system_stock=system,
                actual_stock=actual,
                difference=difference,
            ))

        if not adjustment_items:
            raise ValidationFailure("No stock differences to adjust")

        adjustment_date = adjustment_date or date.today()
        adjustment = InventoryAdjustment(
            id=sequence_service.next_document_id(db, sequence_service.ADJUSTMENT),
            date=adjustment_date,
            warehouse=warehouse,
            notes=notes,
        )
        adjustment.items = adjustment_items
        db.add(adjustment)
        db.flush()

        movements = []
        for item in adjustment_items:
            movements.append(ledger.move(
                MovementType.ADJUSTMENT,
                item.product_id,
                item.difference,
                adjustment.id,
                warehouse,
                notes=notes,
                movement_date=adjustment_date,
            ))
            logger.debug(f"{item.product_id} @ {warehouse}: {item.system_stock} -> {item.actual_stock}")

        db.commit()
        db.refresh(adjustment)
        logger.info(f"Inventory adjustment {adjustment.id} posted with {len(adjustment_items)} changed items")

        return {
            "adjustment": adjustment,
            "stock": ledger.snapshot(seen),
            "movements": movements,
        }

    except ValueError:
        db.rollback()
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error creating adjustment: {str(e)}")
        raise ValidationFailure("Failed to create inventory adjustment")


def get_all_adjustments(db: Session, skip: int = 0, limit: int = 100) -> tuple[List[InventoryAdjustment], int]:
    query = db.query(InventoryAdjustment)
    total = query.count()
    rows = query.order_by(InventoryAdjustment.date.desc(), InventoryAdjustment.id.desc()).offset(skip).limit(limit).all()
    return rows, total


# ==================== TRANSFERS ====================

def create_stock_transfer(
    db: Session,
    from_warehouse: str,
    to_warehouse: str,
    items: List[Dict],
    notes: Optional[str] = None,
    transfer_date: Optional[date] = None,
) -> Dict:
    """
    Move goods between warehouses. Every item produces a TransferOut at the
    source and a TransferIn naming both sides, so totals are conserved.
    """
    logger.info(f"Creating stock transfer {from_warehouse} -> {to_warehouse}")

    try:
        from_warehouse = catalog_service.require_warehouse(db, from_warehouse)
        to_warehouse = catalog_service.require_warehouse(db, to_warehouse)
        if from_warehouse == to_warehouse:
            raise ValidationFailure("Source and destination warehouse must be different")

        if not items:
            raise ValidationFailure("Transfer must contain at least one item")

        transfer_items = []
        for idx, item_data in enumerate(items):
            product = catalog_service.require_product(db, item_data.get("product_id"))
            qty = quantity(item_data.get("quantity"))
            if qty <= 0:
                raise ValidationFailure(f"Item {idx + 1}: quantity must be greater than 0")
            transfer_items.append(StockTransferItem(
                product_id=product.id,
                product_name=product.name,
                quantity=qty,
            ))

        ledger = StockLedgerService(db)
        ledger.check_availability(aggregate_quantities(transfer_items), from_warehouse)

        transfer_date = transfer_date or date.today()
        transfer = StockTransfer(
            id=sequence_service.next_document_id(db, sequence_service.STOCK_TRANSFER),
            date=transfer_date,
            from_warehouse=from_warehouse,
            to_warehouse=to_warehouse,
            status=TransferStatus.COMPLETED,
            notes=notes,
        )
        transfer.items = transfer_items
        db.add(transfer)
        db.flush()

        movements = []
        for item in transfer_items:
            qty = quantity(item.quantity)
            movements.append(ledger.move(
                MovementType.TRANSFER_OUT, item.product_id, -qty, transfer.id, from_warehouse,
                notes=notes, movement_date=transfer_date,
            ))
            movements.append(ledger.move(
                MovementType.TRANSFER_IN, item.product_id, qty, transfer.id, from_warehouse,
                to_warehouse=to_warehouse, notes=notes, movement_date=transfer_date,
            ))

        db.commit()
        db.refresh(transfer)
        logger.info(f"Stock transfer {transfer.id} completed: {len(transfer_items)} items")

        return {
            "transfer": transfer,
            "stock": ledger.snapshot({item.product_id for item in transfer_items}),
            "movements": movements,
        }

    except ValueError:
        db.rollback()
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error creating transfer: {str(e)}")
        raise ValidationFailure("Failed to create stock transfer")


def get_all_transfers(db: Session, skip: int = 0, limit: int = 100) -> tuple[List[StockTransfer], int]:
    query = db.query(StockTransfer)
    total = query.count()
    rows = query.order_by(StockTransfer.date.desc(), StockTransfer.id.desc()).offset(skip).limit(limit).all()
    return rows, total
