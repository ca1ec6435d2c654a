# app/api/dependencies.py
from fastapi import Depends, Request

from app.services.coupon_service import CouponService
from app.services.tax_rate_service import TaxRateService
from app.services.woocommerce_client import WooCommerceClient


#obiekty wspoldzielone przez requesty siedza w app.state (tworzone w create_app)
def get_catalog(request: Request) -> WooCommerceClient:
    return request.app.state.catalog


def get_tax_rate_service(request: Request) -> TaxRateService:
    return request.app.state.tax_rate_service


def get_coupon_service(catalog: WooCommerceClient = Depends(get_catalog)) -> CouponService:
    return CouponService(catalog)
