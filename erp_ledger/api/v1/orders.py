from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from erp_ledger.common.exceptions import error_status
from erp_ledger.core.dependencies import Pagination, get_db
from erp_ledger.logger_config import logger
from erp_ledger.models.sales import OrderStatus
from erp_ledger.schemas.order import (
    OrderCreate,
    OrderEventResponse,
    OrderListResponse,
    OrderPaymentResponse,
    OrderResponse,
    OrderStatusResponse,
    OrderStatusUpdate,
    PaymentCreate,
    SalesReturnCreate,
    SalesReturnEventResponse,
    SalesReturnListResponse,
)
from erp_ledger.services import order_service

router = APIRouter()


def _event_response(result: dict) -> OrderEventResponse:
    return OrderEventResponse(
        updated_order=result["order"],
        new_journal_entries=result["journal_entries"],
        updated_stock=result["stock"],
        new_movements=result["movements"],
        stock_warning=result["stock_warning"],
    )


@router.get("", response_model=OrderListResponse)
def list_orders(
    pagination: Pagination = Depends(),
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    customer_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    orders, total = order_service.get_all_orders(
        db,
        skip=pagination.skip,
        limit=pagination.limit,
        search=pagination.search,
        status=status_filter,
        customer_id=customer_id,
    )
    return OrderListResponse(data=orders, count=total)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(data: OrderCreate, db: Session = Depends(get_db)):
    """Create a Pending order. Stock and accounts move when it is completed."""
    try:
        return order_service.create_order(db, data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception("Error creating order")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create order")


@router.post("/pos", response_model=OrderEventResponse, status_code=status.HTTP_201_CREATED)
def create_pos_order(data: OrderCreate, db: Session = Depends(get_db)):
    """
    Point-of-sale: create the order Completed and Paid in one go.
    Any line short of stock rejects the whole order.
    """
    try:
        return _event_response(order_service.create_and_complete_order(db, data.model_dump()))
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception("Error creating point-of-sale order")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create order")


@router.get("/returns", response_model=SalesReturnListResponse)
def list_sales_returns(
    pagination: Pagination = Depends(),
    order_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    returns, total = order_service.get_all_sales_returns(
        db, skip=pagination.skip, limit=pagination.limit, order_id=order_id
    )
    return SalesReturnListResponse(data=returns, count=total)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, db: Session = Depends(get_db)):
    order = order_service.get_order_by_id(db, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Order {order_id} not found")
    return order


@router.post("/{order_id}/complete", response_model=OrderEventResponse)
def complete_order(order_id: str, db: Session = Depends(get_db)):
    try:
        return _event_response(order_service.complete_order(db, order_id))
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception(f"Error completing order {order_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to complete order")


@router.patch("/{order_id}/status", response_model=OrderStatusResponse)
def update_order_status(order_id: str, data: OrderStatusUpdate, db: Session = Depends(get_db)):
    try:
        return OrderStatusResponse(updated_order=order_service.update_order_status(db, order_id, data.status))
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception(f"Error updating status of order {order_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update order status")


@router.post("/{order_id}/payments", response_model=OrderPaymentResponse)
def record_payment(order_id: str, data: PaymentCreate, db: Session = Depends(get_db)):
    try:
        result = order_service.record_order_payment(db, order_id, data.amount, data.method)
        return OrderPaymentResponse(updated_order=result["order"], new_journal_entry=result["journal_entry"])
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception(f"Error recording payment for order {order_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to record payment")


@router.post("/{order_id}/returns", response_model=SalesReturnEventResponse, status_code=status.HTTP_201_CREATED)
def create_sales_return(order_id: str, data: SalesReturnCreate, db: Session = Depends(get_db)):
    try:
        result = order_service.create_sales_return(
            db,
            order_id,
            items=[item.model_dump() for item in data.items],
            pre_tax_refund=data.pre_tax_refund,
            return_date=data.date,
        )
        return SalesReturnEventResponse(
            new_return=result["sales_return"],
            updated_stock=result["stock"],
            new_movements=result["movements"],
            new_journal_entry=result["journal_entry"],
        )
    except ValueError as e:
        raise HTTPException(status_code=error_status(e), detail=str(e))
    except Exception:
        logger.exception(f"Error creating return for order {order_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create sales return")
