from decimal import Decimal

import requests

from app.domain.pricing import coupon_from_record
from app.services.woocommerce_client import CatalogProduct, CouponRecord, ProductPricePair


class FakeCatalog:
    """Katalog WooCommerce w pamieci, bez sieci."""

    def __init__(
        self,
        products=None,
        sample=None,
        tax_rates=None,
        locale=None,
        coupons=None,
        unreachable=False,
    ):
        self.products = products or {}
        self.sample = sample or []
        self.tax_rates = tax_rates or []
        self.locale = locale
        self.coupons = coupons or {}
        self.unreachable = unreachable
        self.calls = []
        self.created_orders = []
        self.configured = True

    def _call(self, name):
        self.calls.append(name)
        if self.unreachable:
            raise requests.ConnectionError("woocommerce down")

    def fetch_product(self, product_id):
        self._call("fetch_product")
        if product_id not in self.products:
            resp = requests.Response()
            resp.status_code = 404
            raise requests.HTTPError("404 Not Found", response=resp)
        return self.products[product_id]

    def sample_taxable_products(self, n):
        self._call("sample_taxable_products")
        return self.sample[:n]

    def get_explicit_tax_rates(self):
        self._call("get_explicit_tax_rates")
        return self.tax_rates

    def get_store_locale(self):
        self._call("get_store_locale")
        return self.locale

    def find_product_by_barcode(self, barcode):
        self._call("find_product_by_barcode")
        for p in self.products.values():
            if barcode in (p.barcode, p.sku):
                return p
        return None

    def find_coupon_by_code(self, code):
        self._call("find_coupon_by_code")
        return self.coupons.get(code)

    def create_order(self, payload):
        self._call("create_order")
        self.created_orders.append(payload)
        return 9000 + len(self.created_orders)


def product(pid, regular, sale=None, name=None, sku=None, barcode=None):
    return CatalogProduct(
        id=pid,
        name=name or f"Product {pid}",
        regular_price=Decimal(regular),
        sale_price=Decimal(sale) if sale is not None else None,
        sku=sku,
        barcode=barcode or sku,
    )


def pair(regular, effective, name="p"):
    return ProductPricePair(regular_price=Decimal(regular), effective_price=Decimal(effective), name=name)


def coupon_record(code, discount_type, amount, minimum=None, maximum=None, date_expires=None):
    return CouponRecord(
        coupon=coupon_from_record(code, discount_type, amount, minimum, maximum),
        date_expires=date_expires,
    )

