# app/services/woocommerce_client.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

import requests

from app.domain.pricing import Coupon, coupon_from_record, to_decimal
from app.utils.retry import http_retry
from app.utils.settings import (
    WOOCOMMERCE_URL,
    WOOCOMMERCE_CONSUMER_KEY,
    WOOCOMMERCE_CONSUMER_SECRET,
    WOOCOMMERCE_TIMEOUT,
)
from app.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProductPricePair:
    regular_price: Decimal
    effective_price: Decimal
    taxable: bool = True
    name: str = ""


@dataclass(frozen=True)
class TaxRateRecord:
    rate: str
    tax_class: str = ""


@dataclass(frozen=True)
class CatalogProduct:
    id: int
    name: str
    regular_price: Decimal
    sale_price: Decimal | None = None
    sku: str | None = None
    barcode: str | None = None

    @property
    def effective_price(self) -> Decimal:
        return effective_price(self.regular_price, self.sale_price)


@dataclass(frozen=True)
class CouponRecord:
    coupon: Coupon
    date_expires: str | None = None


class CatalogAccessor(Protocol):
    def sample_taxable_products(self, n: int) -> list[ProductPricePair]: ...

    def get_explicit_tax_rates(self) -> list[TaxRateRecord]: ...

    def get_store_locale(self) -> str | None: ...


def effective_price(regular_price: Decimal, sale_price: Decimal | None) -> Decimal:
    #cena promocyjna tylko jesli jest nizsza od regularnej
    if sale_price is not None and sale_price < regular_price:
        return sale_price
    return regular_price


def _price(raw) -> Decimal | None:
    if raw is None or str(raw).strip() == "":
        return None
    return to_decimal(raw, "price")


BARCODE_META_KEYS = (
    "_ywbc_barcode_display_value",
    "_ywbc_barcode_value",
    "ywbc_barcode_display_value_custom_field",
    "_barcode",
)


def _barcode_of(data: dict) -> str | None:
    #plugin YITH Barcodes trzyma kod w meta_data, bez niego kodem jest SKU
    for meta in data.get("meta_data") or []:
        if meta.get("key") in BARCODE_META_KEYS and str(meta.get("value") or "").strip():
            return str(meta["value"]).strip()
    return data.get("sku") or None


def _coupon_limit(raw) -> Decimal | None:
    #woocommerce zapisuje brak limitu jako "0.00"
    value = _price(raw)
    if value is None or value == 0:
        return None
    return value


class WooCommerceClient:
    """
    Klient REST API WooCommerce (wc/v3).
    - katalog produktow i ceny
    - stawki podatkowe i ustawienia sklepu (do wykrywania VAT)
    - kupony
    - wysylanie zamowien z POS
    """

    def __init__(
        self,
        base_url: str | None = None,
        consumer_key: str | None = None,
        consumer_secret: str | None = None,
        timeout: int = WOOCOMMERCE_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or WOOCOMMERCE_URL).rstrip("/")
        self.auth = (
            consumer_key or WOOCOMMERCE_CONSUMER_KEY,
            consumer_secret or WOOCOMMERCE_CONSUMER_SECRET,
        )
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.base_url and all(self.auth))

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/wp-json/wc/v3/{endpoint.lstrip('/')}"

    @http_retry()
    def _get(self, endpoint: str, params: dict | None = None):
        url = self._url(endpoint)
        logger.info(f"WooCommerce GET {url} {params or ''}")

        resp = self.session.get(url, params=params, auth=self.auth, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    @http_retry()
    def _post(self, endpoint: str, payload: dict):
        url = self._url(endpoint)
        logger.info(f"WooCommerce POST {url}")

        resp = self.session.post(url, json=payload, auth=self.auth, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    # katalog
    @staticmethod
    def _to_product(data: dict) -> CatalogProduct:
        regular = _price(data.get("regular_price")) or _price(data.get("price"))
        if regular is None:
            raise ValueError(f"Produkt {data.get('id')} nie ma ceny")

        return CatalogProduct(
            id=data["id"],
            name=data.get("name", ""),
            regular_price=regular,
            sale_price=_price(data.get("sale_price")),
            sku=data.get("sku") or None,
            barcode=_barcode_of(data),
        )

    def fetch_product(self, product_id: int) -> CatalogProduct:
        return self._to_product(self._get(f"products/{product_id}"))

    def find_product_by_barcode(self, barcode: str) -> CatalogProduct | None:
        """
        Szuka produktu po kodzie kreskowym ze skanera.
        Najpierw meta pluginu YITH, potem SKU. WooCommerce przy meta_key
        potrafi zwrocic niepasujace produkty, wiec kod sprawdzamy dokladnie.
        """
        barcode = (barcode or "").strip()
        if not barcode:
            return None

        queries = [
            {"meta_key": "_ywbc_barcode_display_value", "meta_value": barcode},
            {"meta_key": "_ywbc_barcode_value", "meta_value": barcode},
            {"sku": barcode},
        ]
        for params in queries:
            for data in self._get("products", params=params):
                metas = [
                    str(m.get("value")).strip()
                    for m in data.get("meta_data") or []
                    if m.get("key") in BARCODE_META_KEYS
                ]
                if barcode in metas or str(data.get("sku") or "").strip() == barcode:
                    logger.info(f"Kod {barcode} -> produkt {data['id']}")
                    return self._to_product(data)

        logger.info(f"Nie znaleziono produktu dla kodu {barcode}")
        return None

    def sample_taxable_products(self, n: int) -> list[ProductPricePair]:
        products = self._get("products", params={"per_page": n, "status": "publish"})

        pairs = []
        for p in products:
            price = _price(p.get("price"))
            regular = _price(p.get("regular_price"))
            if p.get("tax_status") != "taxable" or price is None or regular is None:
                continue
            if price <= 0:
                continue
            pairs.append(
                ProductPricePair(
                    regular_price=regular,
                    effective_price=price,
                    taxable=True,
                    name=p.get("name", ""),
                )
            )
        return pairs

    # podatki i ustawienia
    def get_explicit_tax_rates(self) -> list[TaxRateRecord]:
        rates = self._get("taxes")
        return [
            TaxRateRecord(rate=str(r.get("rate", "")), tax_class=r.get("class") or "")
            for r in rates
        ]

    def get_store_locale(self) -> str | None:
        settings = self._get("settings/general")
        for s in settings:
            if s.get("id") == "woocommerce_default_country":
                return s.get("value") or None
        return None

    # kupony
    def find_coupon_by_code(self, code: str) -> CouponRecord | None:
        coupons = self._get("coupons", params={"code": code})
        if not coupons:
            return None

        c = coupons[0]
        coupon = coupon_from_record(
            code=c["code"],
            discount_type=c.get("discount_type", ""),
            amount=c.get("amount") or "0",
            minimum_amount=_coupon_limit(c.get("minimum_amount")),
            maximum_amount=_coupon_limit(c.get("maximum_amount")),
        )
        return CouponRecord(coupon=coupon, date_expires=c.get("date_expires"))

    # zamowienia
    def create_order(self, payload: dict) -> int:
        order = self._post("orders", payload)
        return order["id"]
