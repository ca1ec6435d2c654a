# app/api/routers/coupons.py
from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_coupon_service
from app.domain.schemas import CouponOut
from app.services.coupon_service import CouponService

router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.get("/{code}", response_model=CouponOut)
def get_coupon(code: str, svc: CouponService = Depends(get_coupon_service)):
    coupon = svc.find_by_code(code)
    if coupon is None:
        raise HTTPException(status_code=404, detail="Coupon not found or expired")
    return CouponOut(
        code=coupon.code,
        discount_type=coupon.discount_type,
        amount=coupon.amount,
        minimum_amount=coupon.minimum_amount,
        maximum_amount=coupon.maximum_amount,
    )
