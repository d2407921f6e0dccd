from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from erp_ledger.common.exceptions import error_status
from erp_ledger.core.dependencies import Pagination, get_db
from erp_ledger.logger_config import logger
from erp_ledger.models.payment import PaymentStatus
from erp_ledger.models.purchase import PurchaseOrderStatus
from erp_ledger.schemas.purchase import (
    PurchaseOrderCreate,
    PurchaseOrderEventResponse,
    PurchaseOrderListResponse,
    PurchaseOrderResponse,
    PurchaseOrderStatusUpdate,
    PurchasePaymentResponse,
    SupplierPaymentCreate,
)
from erp_ledger.services import purchase_service

router = APIRouter()


@router.get("", response_model=PurchaseOrderListResponse)
def list_purchase_orders(
    pagination: Pagination = Depends(),
    supplier_id: Optional[str] = Query(None),
    status_filter: Optional[PurchaseOrderStatus] = Query(None, alias="status"),
    payment_status: Optional[PaymentStatus] = Query(None),
    db: Session = Depends(get_db),
):
    purchase_orders, total = purchase_service.get_all_purchase_orders(
        db,
        skip=pagination.skip,
        limit=pagination.limit,
        supplier_id=supplier_id,
        status=status_filter,
        payment_status=payment_status,
        search=pagination.search,
    )
    return PurchaseOrderListResponse(data=purchase_orders, count=total)


@router.post("", response_model=PurchaseOrderResponse, status_code=status.HTTP_201_CREATED)
def create_purchase_order(data: PurchaseOrderCreate, db: Session = Depends(get_db)):
    try:
        return purchase_service.create_purchase_order(db, data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception("Error creating purchase order")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create purchase order")


@router.get("/{po_id}", response_model=PurchaseOrderResponse)
def get_purchase_order(po_id: str, db: Session = Depends(get_db)):
    po = purchase_service.get_purchase_order_by_id(db, po_id)
    if not po:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Purchase order {po_id} not found")
    return po


@router.patch("/{po_id}/status", response_model=PurchaseOrderEventResponse)
def update_purchase_order_status(po_id: str, data: PurchaseOrderStatusUpdate, db: Session = Depends(get_db)):
    """Setting status to Received books the goods in and posts the payable."""
    try:
        result = purchase_service.update_purchase_order_status(db, po_id, data.status)
        return PurchaseOrderEventResponse(
            updated_po=result["purchase_order"],
            new_movements=result["movements"],
            updated_stock=result["stock"],
            new_journal_entry=result["journal_entry"],
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception(f"Error updating purchase order {po_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update purchase order")


@router.delete("/{po_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_purchase_order(po_id: str, db: Session = Depends(get_db)):
    try:
        deleted = purchase_service.delete_purchase_order(db, po_id)
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Purchase order {po_id} not found")
    return None


@router.post("/{po_id}/payments", response_model=PurchasePaymentResponse)
def record_purchase_payment(po_id: str, data: SupplierPaymentCreate, db: Session = Depends(get_db)):
    try:
        result = purchase_service.record_purchase_payment(db, po_id, data.amount)
        return PurchasePaymentResponse(updated_po=result["purchase_order"], new_journal_entry=result["journal_entry"])
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception(f"Error recording payment for purchase order {po_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to record payment")
