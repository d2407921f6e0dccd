"""
Production service: bills of materials, work orders and their completion.
Completing a work order consumes raw materials (with waste allowance) and
receives the finished good in the work order's warehouse.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from erp_ledger.common.exceptions import (
    AlreadyProcessedError,
    InsufficientStockError,
    NotFoundError,
    ValidationFailure,
)
from erp_ledger.core.config import settings
from erp_ledger.logger_config import logger
from erp_ledger.models.inventory import MovementType
from erp_ledger.models.production import (
    DEFAULT_PRODUCTION_STEPS,
    BillOfMaterials,
    BillOfMaterialsItem,
    ProductionStep,
    WorkOrder,
    WorkOrderStatus,
)
from erp_ledger.services import catalog_service, sequence_service
from erp_ledger.services.stock_ledger import StockLedgerService
from erp_ledger.utils.amounts import ZERO, money, quantity, to_decimal


def _bom_line_cost(cost, qty, waste) -> Decimal:
    return to_decimal(cost) * to_decimal(qty) * (1 + to_decimal(waste) / 100)


def _aggregate_bom_by_material(bom_items, units) -> Dict[str, Dict[str, Any]]:
    """
    Required quantity per raw material for `units` finished goods, waste included.
    The same material on several BOM lines is summed; BOM order is kept.
    """
    agg: Dict[str, Dict[str, Any]] = {}
    for item in bom_items:
        required = to_decimal(item.quantity) * to_decimal(units) * (1 + to_decimal(item.waste) / 100)
        entry = agg.setdefault(item.product_id, {"product_name": item.product_name, "required": Decimal("0")})
        entry["required"] += required
    for entry in agg.values():
        entry["required"] = quantity(entry["required"])
    return agg


def _get_work_order(db: Session, work_order_id: str, lock: bool = False) -> WorkOrder:
    query = db.query(WorkOrder).filter(WorkOrder.id == work_order_id)
    if lock:
        query = query.with_for_update()
    work_order = query.first()
    if not work_order:
        raise NotFoundError(f"Work order {work_order_id} not found")
    return work_order


# ==================== BILLS OF MATERIALS ====================

def get_bom_by_id(db: Session, bom_id: str) -> Optional[BillOfMaterials]:
    return db.query(BillOfMaterials).filter(BillOfMaterials.id == bom_id).first()


def get_all_boms(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
) -> tuple[List[BillOfMaterials], int]:
    query = db.query(BillOfMaterials)
    if search:
        query = query.filter(
            or_(
                BillOfMaterials.name.ilike(f"%{search}%"),
                BillOfMaterials.product_id.ilike(f"%{search}%"),
            )
        )
    total = query.count()
    boms = query.order_by(BillOfMaterials.id).offset(skip).limit(limit).all()
    return boms, total


def save_bom(db: Session, data: Dict, bom_id: Optional[str] = None) -> BillOfMaterials:
    """
    Create a BOM, or replace the lines of an existing one when bom_id is given.
    Line cost defaults to the material's product cost.
    """
    logger.info(f"Saving BOM {bom_id or '(new)'} for product {data.get('product_id')}")

    try:
        product = catalog_service.require_product(db, data.get("product_id"))

        items = data.get("items") or []
        if not items:
            raise ValidationFailure("BOM must contain at least one material")

        bom_items = []
        total_cost = ZERO
        for idx, item_data in enumerate(items):
            material = catalog_service.require_product(db, item_data.get("product_id"))
            if material.id == product.id:
                raise ValidationFailure("A product cannot be a material of its own BOM")

            qty = quantity(item_data.get("quantity"))
            waste = to_decimal(item_data.get("waste") or 0)
            cost = money(item_data.get("cost") if item_data.get("cost") is not None else material.cost)

            if qty <= 0:
                raise ValidationFailure(f"Material {idx + 1}: quantity must be greater than 0")
            if waste < 0 or waste >= 100:
                raise ValidationFailure(f"Material {idx + 1}: waste must be between 0 and 100 percent")
            if cost < 0:
                raise ValidationFailure(f"Material {idx + 1}: cost cannot be negative")

            total_cost += _bom_line_cost(cost, qty, waste)
            bom_items.append(BillOfMaterialsItem(
                product_id=material.id,
                product_name=material.name,
                quantity=qty,
                cost=cost,
                waste=waste,
            ))

        if bom_id:
            bom = db.query(BillOfMaterials).filter(BillOfMaterials.id == bom_id).with_for_update().first()
            if not bom:
                raise NotFoundError(f"BOM {bom_id} not found")
        else:
            bom = BillOfMaterials(id=sequence_service.next_document_id(db, sequence_service.BOM))
            db.add(bom)

        bom.name = data.get("name") or f"BOM - {product.name}"
        bom.product_id = product.id
        bom.items = bom_items
        bom.total_cost = money(total_cost)
        bom.last_updated = date.today()

        db.commit()
        db.refresh(bom)
        logger.info(f"BOM {bom.id} saved: {len(bom_items)} materials, unit cost {bom.total_cost}")
        return bom

    except ValueError:
        db.rollback()
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"BOM save integrity error: {e}")
        raise ValidationFailure("Failed to save BOM")


def delete_bom(db: Session, bom_id: str) -> bool:
    bom = get_bom_by_id(db, bom_id)
    if not bom:
        return False

    in_use = db.query(WorkOrder).filter(WorkOrder.bom_id == bom_id).count()
    if in_use:
        raise ValidationFailure(f"BOM {bom_id} is used by {in_use} work order(s)")

    db.delete(bom)
    try:
        db.commit()
        logger.info(f"BOM {bom_id} deleted")
        return True
    except IntegrityError as e:
        db.rollback()
        logger.error(f"BOM delete integrity error: {e}")
        raise ValidationFailure("Failed to delete BOM")


# ==================== WORK ORDERS ====================

def get_work_order_by_id(db: Session, work_order_id: str) -> Optional[WorkOrder]:
    return db.query(WorkOrder).filter(WorkOrder.id == work_order_id).first()


def get_all_work_orders(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    status: Optional[WorkOrderStatus] = None,
    search: Optional[str] = None,
) -> tuple[List[WorkOrder], int]:
    query = db.query(WorkOrder)
    if status:
        query = query.filter(WorkOrder.status == status)
    if search:
        query = query.filter(
            or_(
                WorkOrder.id.ilike(f"%{search}%"),
                WorkOrder.product_name.ilike(f"%{search}%"),
            )
        )
    total = query.count()
    work_orders = query.order_by(WorkOrder.creation_date.desc(), WorkOrder.id.desc()).offset(skip).limit(limit).all()
    return work_orders, total


def create_work_order(db: Session, data: Dict) -> WorkOrder:
    """Create a Pending work order with the default production steps."""
    logger.info(f"Creating work order from BOM {data.get('bom_id')}")

    try:
        bom = get_bom_by_id(db, data.get("bom_id"))
        if not bom:
            raise NotFoundError(f"BOM {data.get('bom_id')} not found")

        product = catalog_service.require_product(db, data.get("product_id") or bom.product_id)
        if product.id != bom.product_id:
            raise ValidationFailure(f"BOM {bom.id} does not produce product {product.id}")

        warehouse = catalog_service.require_warehouse(db, data.get("warehouse"))
        qty = quantity(data.get("quantity_to_produce"))
        if qty <= 0:
            raise ValidationFailure("Quantity to produce must be greater than 0")

        work_order = WorkOrder(
            id=sequence_service.next_document_id(db, sequence_service.WORK_ORDER),
            product_id=product.id,
            product_name=product.name,
            quantity_to_produce=qty,
            bom_id=bom.id,
            status=WorkOrderStatus.PENDING,
            creation_date=data.get("creation_date") or date.today(),
            warehouse=warehouse,
            notes=data.get("notes"),
            estimated_cost=money(to_decimal(bom.total_cost) * qty),
        )
        work_order.production_steps = [
            ProductionStep(position=position, name=name, completed=False)
            for position, name in enumerate(DEFAULT_PRODUCTION_STEPS)
        ]
        db.add(work_order)
        db.commit()
        db.refresh(work_order)
        logger.info(f"Work order {work_order.id} created: {qty} x {product.name}, estimated {work_order.estimated_cost}")
        return work_order

    except ValueError:
        db.rollback()
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Work order create integrity error: {e}")
        raise ValidationFailure("Failed to create work order")


def update_work_order_status(db: Session, work_order_id: str, status: WorkOrderStatus) -> WorkOrder:
    """Pending <-> InProgress. Starting a work order ticks off its first step."""
    work_order = _get_work_order(db, work_order_id, lock=True)

    if status == WorkOrderStatus.COMPLETED:
        db.rollback()
        raise ValidationFailure("Use the complete operation to finish a work order")
    if work_order.status == WorkOrderStatus.COMPLETED:
        db.rollback()
        raise AlreadyProcessedError(f"Work order {work_order_id} is already completed")

    work_order.status = status
    if status == WorkOrderStatus.IN_PROGRESS and work_order.production_steps:
        work_order.production_steps[0].completed = True

    db.commit()
    db.refresh(work_order)
    logger.info(f"Work order {work_order_id} status -> {status.value}")
    return work_order


def update_work_order_steps(db: Session, work_order_id: str, steps: List[Dict]) -> WorkOrder:
    """Replace the step checklist of an open work order."""
    work_order = _get_work_order(db, work_order_id, lock=True)
    if work_order.status == WorkOrderStatus.COMPLETED:
        db.rollback()
        raise AlreadyProcessedError(f"Work order {work_order_id} is already completed")
    if not steps:
        db.rollback()
        raise ValidationFailure("A work order needs at least one production step")

    work_order.production_steps = [
        ProductionStep(position=position, name=step["name"], completed=bool(step.get("completed")))
        for position, step in enumerate(steps)
    ]
    db.commit()
    db.refresh(work_order)
    return work_order


def work_order_requirements(db: Session, work_order_id: str) -> Dict[str, Any]:
    """Materials needed to complete a work order against what its warehouse holds."""
    work_order = _get_work_order(db, work_order_id)
    ledger = StockLedgerService(db)
    aggregated = _aggregate_bom_by_material(work_order.bom.items, work_order.quantity_to_produce)

    requirements = []
    for product_id, data in aggregated.items():
        available = ledger.get_stock(product_id, work_order.warehouse)
        requirements.append({
            "product_id": product_id,
            "product_name": data["product_name"],
            "required_quantity": data["required"],
            "available_quantity": available,
            "shortfall": max(data["required"] - available, quantity(0)),
            "sufficient": available >= data["required"],
        })

    return {
        "work_order_id": work_order.id,
        "warehouse": work_order.warehouse,
        "requirements": requirements,
        "feasible": all(r["sufficient"] for r in requirements),
    }


def complete_work_order(db: Session, work_order_id: str, actual_cost: Optional[Decimal] = None) -> Dict:
    """
    Finish production: issue every raw material (waste included) from the work
    order's warehouse, receive the finished goods there, tick all steps.
    actual_cost defaults to the estimate. No journal entry is posted.
    """
    logger.info(f"Completing work order {work_order_id}")

    try:
        work_order = _get_work_order(db, work_order_id, lock=True)
        if work_order.status == WorkOrderStatus.COMPLETED:
            raise AlreadyProcessedError(f"Work order {work_order_id} is already completed")

        bom = work_order.bom
        if not bom:
            raise NotFoundError(f"BOM {work_order.bom_id} not found")

        ledger = StockLedgerService(db)
        aggregated = _aggregate_bom_by_material(bom.items, work_order.quantity_to_produce)

        if not settings.ALLOW_NEGATIVE_STOCK:
            for product_id, data in aggregated.items():
                available = ledger.get_stock(product_id, work_order.warehouse)
                if available < data["required"]:
                    raise InsufficientStockError(
                        f'Insufficient raw material "{data["product_name"]}" in {work_order.warehouse}: '
                        f"need {data['required']}, only {available} available "
                        f"(short by {data['required'] - available})"
                    )

        completion_date = date.today()
        movements = []
        for product_id, data in aggregated.items():
            if data["required"] <= 0:
                continue
            movements.append(ledger.move(
                MovementType.PRODUCTION_ISSUE,
                product_id,
                -data["required"],
                work_order.id,
                work_order.warehouse,
                movement_date=completion_date,
            ))

        movements.append(ledger.move(
            MovementType.PRODUCTION_RECEIPT,
            work_order.product_id,
            quantity(work_order.quantity_to_produce),
            work_order.id,
            work_order.warehouse,
            movement_date=completion_date,
        ))

        for step in work_order.production_steps:
            step.completed = True
        work_order.status = WorkOrderStatus.COMPLETED
        work_order.completion_date = completion_date
        work_order.actual_cost = money(actual_cost if actual_cost is not None else work_order.estimated_cost)

        db.commit()
        db.refresh(work_order)
        logger.info(
            f"Work order {work_order_id} completed: {work_order.quantity_to_produce} x {work_order.product_name}, "
            f"actual cost {work_order.actual_cost} (estimated {work_order.estimated_cost})"
        )

        touched = set(aggregated) | {work_order.product_id}
        return {
            "work_order": work_order,
            "stock": ledger.snapshot(touched),
            "movements": movements,
        }

    except ValueError as ve:
        db.rollback()
        logger.warning(f"Work order {work_order_id} not completed: {str(ve)}")
        raise

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Work order completion integrity error: {e}")
        raise ValidationFailure("Failed to complete work order")
