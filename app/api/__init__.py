# app/api/__init__.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from requests import RequestException

from app.api.routers import carts, coupons, health, orders, pricing, products, tax
from app.domain.errors import TaxRateUnavailable
from app.services.tax_cache import build_cache
from app.services.tax_inference import TaxRateInference
from app.services.tax_rate_service import TaxRateService
from app.services.woocommerce_client import WooCommerceClient
from app.utils.settings import TAX_RATE_CACHE_BACKEND
from app.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(
    catalog: WooCommerceClient | None = None,
    tax_rate_service: TaxRateService | None = None,
) -> FastAPI:
    app = FastAPI(title="POS Pricing Service", version="1.0.0")

    catalog = catalog or WooCommerceClient()
    app.state.catalog = catalog
    app.state.tax_rate_service = tax_rate_service or TaxRateService(
        inference=TaxRateInference(catalog),
        cache=build_cache(TAX_RATE_CACHE_BACKEND),
    )

    @app.exception_handler(TaxRateUnavailable)
    async def tax_rate_unavailable(request: Request, exc: TaxRateUnavailable):
        logger.error(f"{request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(RequestException)
    async def woocommerce_unreachable(request: Request, exc: RequestException):
        logger.error(f"{request.url.path}: WooCommerce error {exc}")
        return JSONResponse(status_code=502, content={"detail": "WooCommerce niedostepny"})

    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(products.router)
    app.include_router(coupons.router)
    app.include_router(tax.router)
    app.include_router(pricing.router)

    return app
