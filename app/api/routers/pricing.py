# app/api/routers/pricing.py
from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_coupon_service, get_tax_rate_service
from app.domain.pricing import CartLine
from app.domain.schemas import PricingIn, PricingOut
from app.services.coupon_service import CouponService
from app.services.pricing_service import PricingService
from app.services.tax_rate_service import TaxRateService

router = APIRouter(prefix="/pricing", tags=["pricing"])


def get_service(
    coupon_service: CouponService = Depends(get_coupon_service),
    tax_rate_service: TaxRateService = Depends(get_tax_rate_service),
):
    return PricingService(coupon_service, tax_rate_service)


@router.post("/totals", response_model=PricingOut)
def totals(payload: PricingIn, svc: PricingService = Depends(get_service)):
    try:
        lines = [
            CartLine(unit_price=line.unit_price, quantity=line.quantity, regular_price=line.regular_price)
            for line in payload.lines
        ]
        return svc.quote(lines, payload.coupon_code, payload.tax_rate)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
