# app/api/routers/tax.py
from fastapi import APIRouter, Depends

from app.api.dependencies import get_tax_rate_service
from app.domain.schemas import TaxRateOut
from app.services.tax_rate_service import TaxRateService

router = APIRouter(prefix="/tax-rate", tags=["tax"])


@router.get("", response_model=TaxRateOut)
def get_tax_rate(svc: TaxRateService = Depends(get_tax_rate_service)):
    return {"tax_rate": svc.get_effective_tax_rate()}


@router.post("/refresh", response_model=TaxRateOut)
def refresh_tax_rate(svc: TaxRateService = Depends(get_tax_rate_service)):
    """Panel admina "odswiez dane": kasuje cache i liczy stawke od nowa."""
    svc.invalidate_tax_rate_cache()
    return {"tax_rate": svc.get_effective_tax_rate()}
