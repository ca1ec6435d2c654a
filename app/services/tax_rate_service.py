# app/services/tax_rate_service.py
from decimal import Decimal

from app.services.tax_cache import RateCache
from app.services.tax_inference import TaxRateInference
from app.utils.logging import get_logger

logger = get_logger(__name__)


class TaxRateService:
    """
    get-or-compute efektywnej stawki VAT.
    Wykrywanie (kilka zapytan do WooCommerce) odpala sie tylko przy
    pustym / wygaslym cache albo po recznym "odswiez dane".
    """

    def __init__(self, inference: TaxRateInference, cache: RateCache):
        self.inference = inference
        self.cache = cache

    def get_effective_tax_rate(self) -> Decimal:
        cached = self.cache.get()
        if cached is not None:
            logger.debug(f"Stawka VAT z cache: {cached}%")
            return cached

        rate = self.inference.compute()
        self.cache.set(rate)
        return rate

    def invalidate_tax_rate_cache(self) -> None:
        logger.info("Invalidacja cache stawki VAT")
        self.cache.invalidate()
