"""
Production API: bills of materials and work orders.
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from erp_ledger.common.exceptions import error_status
from erp_ledger.core.dependencies import Pagination, get_db
from erp_ledger.logger_config import logger
from erp_ledger.models.production import WorkOrderStatus
from erp_ledger.schemas.production import (
    BomCreate,
    BomListResponse,
    BomResponse,
    WorkOrderComplete,
    WorkOrderCreate,
    WorkOrderEventResponse,
    WorkOrderListResponse,
    WorkOrderRequirementsResponse,
    WorkOrderResponse,
    WorkOrderStatusUpdate,
    WorkOrderStepsUpdate,
)
from erp_ledger.services import production_service

router = APIRouter()


# ==================== BOMs ====================

@router.get("/boms", response_model=BomListResponse)
def list_boms(pagination: Pagination = Depends(), db: Session = Depends(get_db)):
    boms, total = production_service.get_all_boms(
        db, skip=pagination.skip, limit=pagination.limit, search=pagination.search
    )
    return BomListResponse(data=boms, count=total)


@router.post("/boms", response_model=BomResponse, status_code=status.HTTP_201_CREATED)
def create_bom(data: BomCreate, db: Session = Depends(get_db)):
    """Create a bill of materials; total cost includes each line's waste allowance."""
    try:
        return production_service.save_bom(db, data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception("Error creating BOM")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create BOM")


@router.put("/boms/{bom_id}", response_model=BomResponse)
def update_bom(bom_id: str, data: BomCreate, db: Session = Depends(get_db)):
    try:
        return production_service.save_bom(db, data.model_dump(), bom_id=bom_id)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception(f"Error updating BOM {bom_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update BOM")


@router.delete("/boms/{bom_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bom(bom_id: str, db: Session = Depends(get_db)):
    try:
        deleted = production_service.delete_bom(db, bom_id)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"BOM {bom_id} not found")
    return None


# ==================== WORK ORDERS ====================

@router.get("/work-orders", response_model=WorkOrderListResponse)
def list_work_orders(
    pagination: Pagination = Depends(),
    status_filter: Optional[WorkOrderStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    work_orders, total = production_service.get_all_work_orders(
        db, skip=pagination.skip, limit=pagination.limit, status=status_filter, search=pagination.search
    )
    return WorkOrderListResponse(data=work_orders, count=total)


@router.post("/work-orders", response_model=WorkOrderResponse, status_code=status.HTTP_201_CREATED)
def create_work_order(data: WorkOrderCreate, db: Session = Depends(get_db)):
    try:
        return production_service.create_work_order(db, data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception("Error creating work order")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create work order")


@router.get("/work-orders/{work_order_id}", response_model=WorkOrderResponse)
def get_work_order(work_order_id: str, db: Session = Depends(get_db)):
    work_order = production_service.get_work_order_by_id(db, work_order_id)
    if not work_order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Work order {work_order_id} not found")
    return work_order


@router.get("/work-orders/{work_order_id}/requirements", response_model=WorkOrderRequirementsResponse)
def get_work_order_requirements(work_order_id: str, db: Session = Depends(get_db)):
    """Raw materials needed to complete the work order versus stock in its warehouse."""
    try:
        return production_service.work_order_requirements(db, work_order_id)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.patch("/work-orders/{work_order_id}/status", response_model=WorkOrderResponse)
def update_work_order_status(work_order_id: str, data: WorkOrderStatusUpdate, db: Session = Depends(get_db)):
    try:
        return production_service.update_work_order_status(db, work_order_id, data.status)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.put("/work-orders/{work_order_id}/steps", response_model=WorkOrderResponse)
def update_work_order_steps(work_order_id: str, data: WorkOrderStepsUpdate, db: Session = Depends(get_db)):
    try:
        return production_service.update_work_order_steps(
            db, work_order_id, [step.model_dump() for step in data.steps]
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))


@router.post("/work-orders/{work_order_id}/complete", response_model=WorkOrderEventResponse)
def complete_work_order(
    work_order_id: str,
    data: Optional[WorkOrderComplete] = None,
    db: Session = Depends(get_db),
):
    """
    Consume raw materials (waste included) and receive the finished goods.
    Rejected with the first short material when stock is insufficient.
    """
    try:
        result = production_service.complete_work_order(
            db, work_order_id, actual_cost=data.actual_cost if data else None
        )
        return WorkOrderEventResponse(
            updated_work_order=result["work_order"],
            updated_stock=result["stock"],
            new_movements=result["movements"],
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception(f"Error completing work order {work_order_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to complete work order")
