# app/services/tax_inference.py
"""
Wykrywanie efektywnej stawki VAT sklepu.

Sklep nie zawsze wystawia skonfigurowane stawki, wiec stawka jest
odgadywana z kilku zrodel. Poziomy (tiers) sa sprawdzane po kolei,
wygrywa pierwszy, ktory zwroci wartosc. Blad pojedynczego poziomu
(siec, pusty wynik, smieci w polu) jest logowany na debug i powoduje
przejscie dalej - nigdy nie trafia do wywolujacego.

Kolejne poziomy sa wolane sekwencyjnie, bo kazdy kolejny ma sens tylko
gdy poprzedni zawiodl.
"""
from dataclasses import dataclass
from decimal import Decimal
from functools import cached_property
from typing import Iterable, Protocol, Sequence

from app.domain.errors import InferenceTierFailure, TaxRateUnavailable
from app.domain.pricing import ONE, HUNDRED, ZERO, to_decimal
from app.services.woocommerce_client import CatalogAccessor, ProductPricePair
from app.utils import settings
from app.utils.logging import get_logger

logger = get_logger(__name__)

STANDARD_CLASSES = ("standard", "")


def _as_rate(raw) -> Decimal:
    rate = to_decimal(raw, "rate")
    if rate < ZERO or rate > HUNDRED:
        raise InferenceTierFailure(f"Stawka poza zakresem 0-100: {raw!r}")
    #"18.0000" z woocommerce -> 18
    return rate.to_integral() if rate == rate.to_integral() else rate


@dataclass(frozen=True)
class MatchTolerance:
    absolute: Decimal = Decimal("0.50")
    relative: Decimal = Decimal("0.01")

    def matches(self, actual: Decimal, expected: Decimal, regular: Decimal) -> bool:
        allowed = max(self.absolute, regular * self.relative)
        return abs(actual - expected) <= allowed


class InferenceContext:
    """Dane wspoldzielone przez poziomy w ramach jednego liczenia."""

    def __init__(self, catalog: CatalogAccessor, sample_size: int):
        self.catalog = catalog
        self.sample_size = sample_size

    @cached_property
    def sample(self) -> list[ProductPricePair]:
        #pobierane raz, uzywane przez price-pair i inclusive-price
        products = self.catalog.sample_taxable_products(self.sample_size)
        return [p for p in products if p.taxable]


class TaxTier(Protocol):
    name: str

    def resolve(self, ctx: InferenceContext) -> Decimal | None: ...


class ExplicitRateTier:
    name = "explicit-rates"

    def resolve(self, ctx: InferenceContext) -> Decimal | None:
        records = ctx.catalog.get_explicit_tax_rates()
        if not records:
            return None

        chosen = next(
            (r for r in records if (r.tax_class or "").lower() in STANDARD_CLASSES),
            records[0],
        )
        return _as_rate(chosen.rate)


class PricePairTier:
    """Szuka stawki, dla ktorej cena = regularna * (1 + r) albo regularna / (1 + r)."""

    name = "price-pairs"

    def __init__(self, candidate_rates: Iterable[Decimal], tolerance: MatchTolerance):
        self.candidate_rates = sorted(to_decimal(r) for r in candidate_rates)
        self.tolerance = tolerance

    def resolve(self, ctx: InferenceContext) -> Decimal | None:
        sample = ctx.sample
        logger.debug(f"Analiza {len(sample)} produktow pod katem stawki VAT")

        for rate in self.candidate_rates:
            factor = ONE + rate / HUNDRED
            for product in sample:
                regular = product.regular_price
                price = product.effective_price

                if self.tolerance.matches(price, regular * factor, regular):
                    logger.info(f"Wykryto stawke {rate}% (brutto) z produktu {product.name!r}")
                    return _as_rate(rate)

                if self.tolerance.matches(price, regular / factor, regular):
                    logger.info(f"Wykryto stawke {rate}% (odwrotnie) z produktu {product.name!r}")
                    return _as_rate(rate)
        return None


class InclusivePriceTier:
    """Ceny regularne == efektywne -> zakladamy ceny brutto ze stawka domyslna regionu."""

    name = "inclusive-prices"

    def __init__(self, default_rate: Decimal, tolerance: MatchTolerance):
        self.default_rate = default_rate
        self.tolerance = tolerance

    def resolve(self, ctx: InferenceContext) -> Decimal | None:
        sample = ctx.sample
        if not sample:
            return None

        if all(self.tolerance.matches(p.effective_price, p.regular_price, p.regular_price) for p in sample):
            return _as_rate(self.default_rate)
        return None


class StoreLocaleTier:
    name = "store-locale"

    def __init__(self, region_defaults: dict[str, Decimal]):
        self.region_defaults = {k.upper(): v for k, v in region_defaults.items()}

    def resolve(self, ctx: InferenceContext) -> Decimal | None:
        locale = ctx.catalog.get_store_locale()
        if not locale:
            return None

        #woocommerce: "IN:MH" (kraj:stan)
        country = locale.split(":", 1)[0].strip().upper()
        rate = self.region_defaults.get(country)
        return _as_rate(rate) if rate is not None else None


class FallbackTier:
    name = "fallback"

    def __init__(self, rate):
        self.rate = rate

    def resolve(self, ctx: InferenceContext) -> Decimal | None:
        return _as_rate(self.rate)


def default_tiers() -> list[TaxTier]:
    tolerance = MatchTolerance(
        absolute=settings.TAX_MATCH_ABS_TOLERANCE,
        relative=settings.TAX_MATCH_REL_TOLERANCE,
    )
    return [
        ExplicitRateTier(),
        PricePairTier(settings.TAX_CANDIDATE_RATES, tolerance),
        InclusivePriceTier(settings.TAX_INCLUSIVE_DEFAULT_RATE, tolerance),
        StoreLocaleTier(settings.TAX_REGION_DEFAULTS),
        FallbackTier(settings.TAX_FALLBACK_RATE),
    ]


class TaxRateInference:
    def __init__(
        self,
        catalog: CatalogAccessor,
        tiers: Sequence[TaxTier] | None = None,
        sample_size: int = settings.TAX_SAMPLE_SIZE,
    ):
        self.catalog = catalog
        self.tiers = list(tiers) if tiers is not None else default_tiers()
        self.sample_size = sample_size

    def compute(self) -> Decimal:
        ctx = InferenceContext(self.catalog, self.sample_size)

        for tier in self.tiers:
            try:
                rate = tier.resolve(ctx)
            except Exception as e:
                logger.debug(f"Poziom {tier.name} nie dal stawki: {e!r}")
                continue

            if rate is not None:
                logger.info(f"Stawka VAT {rate}% z poziomu {tier.name}")
                return rate

            logger.debug(f"Poziom {tier.name} bez wyniku, dalej")

        raise TaxRateUnavailable("Nie udalo sie ustalic stawki VAT (brak poprawnej stalej awaryjnej)")
