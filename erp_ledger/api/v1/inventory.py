from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from erp_ledger.common.exceptions import error_status
from erp_ledger.core.dependencies import Pagination, get_db
from erp_ledger.logger_config import logger
from erp_ledger.models.inventory import MovementType
from erp_ledger.schemas.inventory import (
    AdjustmentCreate,
    AdjustmentEventResponse,
    AdjustmentListResponse,
    MovementListResponse,
    StockItemResponse,
    TransferCreate,
    TransferEventResponse,
    TransferListResponse,
)
from erp_ledger.services import inventory_service
from erp_ledger.services.stock_ledger import StockLedgerService

router = APIRouter()


@router.get("/stock", response_model=List[StockItemResponse])
def get_stock(
    product_id: Optional[str] = Query(None),
    warehouse: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return StockLedgerService(db).snapshot([product_id] if product_id else None, warehouse=warehouse)


@router.get("/stock/reconcile")
def reconcile_stock(
    product_id: str = Query(...),
    warehouse: str = Query(...),
    db: Session = Depends(get_db),
):
    """Compare the stock row with the stock implied by the movement log."""
    service = StockLedgerService(db)
    stock = service.get_stock(product_id, warehouse)
    reconstructed = service.reconstruct_stock(product_id, warehouse)
    if stock != reconstructed:
        logger.warning(f"Stock drift for {product_id} @ {warehouse}: row {stock}, movements {reconstructed}")
    return {
        "product_id": product_id,
        "warehouse": warehouse,
        "stock": stock,
        "reconstructed": reconstructed,
        "consistent": stock == reconstructed,
    }


@router.get("/movements", response_model=MovementListResponse)
def list_movements(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    product_id: Optional[str] = Query(None),
    warehouse: Optional[str] = Query(None),
    movement_type: Optional[MovementType] = Query(None, alias="type"),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
):
    try:
        service = StockLedgerService(db)

        rows, count, totals = service.get_all_movements(
            skip=skip,
            limit=limit,
            search=search,
            product_id=product_id,
            warehouse=warehouse,
            movement_type=movement_type,
            start_date=start_date,
            end_date=end_date,
        )

        return MovementListResponse(data=rows, count=count, total_dic=totals)

    except Exception:
        logger.exception("Error fetching inventory movements")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch inventory movements",
        )


@router.get("/adjustments", response_model=AdjustmentListResponse)
def list_adjustments(pagination: Pagination = Depends(), db: Session = Depends(get_db)):
    rows, total = inventory_service.get_all_adjustments(db, skip=pagination.skip, limit=pagination.limit)
    return AdjustmentListResponse(data=rows, count=total)


@router.post("/adjustments", response_model=AdjustmentEventResponse, status_code=status.HTTP_201_CREATED)
def create_adjustment(data: AdjustmentCreate, db: Session = Depends(get_db)):
    try:
        result = inventory_service.create_inventory_adjustment(
            db,
            warehouse=data.warehouse,
            items=[item.model_dump() for item in data.items],
            notes=data.notes,
            adjustment_date=data.date,
        )
        return AdjustmentEventResponse(
            new_adjustment=result["adjustment"],
            updated_stock=result["stock"],
            new_movements=result["movements"],
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception("Error creating inventory adjustment")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create adjustment")


@router.get("/transfers", response_model=TransferListResponse)
def list_transfers(pagination: Pagination = Depends(), db: Session = Depends(get_db)):
    rows, total = inventory_service.get_all_transfers(db, skip=pagination.skip, limit=pagination.limit)
    return TransferListResponse(data=rows, count=total)


@router.post("/transfers", response_model=TransferEventResponse, status_code=status.HTTP_201_CREATED)
def create_transfer(data: TransferCreate, db: Session = Depends(get_db)):
    try:
        result = inventory_service.create_stock_transfer(
            db,
            from_warehouse=data.from_warehouse,
            to_warehouse=data.to_warehouse,
            items=[item.model_dump() for item in data.items],
            notes=data.notes,
            transfer_date=data.date,
        )
        return TransferEventResponse(
            new_transfer=result["transfer"],
            updated_stock=result["stock"],
            new_movements=result["movements"],
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception("Error creating stock transfer")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create transfer")
