# app/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.dependencies import get_tax_rate_service
from app.data.database import get_db
from app.domain.schemas import OrderOut
from app.services.order_service import OrderService
from app.services.tax_rate_service import TaxRateService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    tax_rate_service: TaxRateService = Depends(get_tax_rate_service),
):
    return OrderService(db, tax_rate_service)


@router.get("/", response_model=List[OrderOut])
def list_orders(
    limit: int = Query(50, ge=1, le=500),
    svc: OrderService = Depends(get_service),
):
    """
    Historia zamówień, najnowsze pierwsze.
    """
    return svc.list_orders(limit)


@router.get("/unsynced", response_model=List[OrderOut])
def list_unsynced_orders(
    limit: int = Query(50, ge=1, le=500),
    svc: OrderService = Depends(get_service),
):
    return svc.list_unsynced_orders(limit)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, svc: OrderService = Depends(get_service)):
    """
    Pobiera szczegóły zamówienia.
    """
    try:
        return svc.get_order(order_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
