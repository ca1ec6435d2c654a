# app/services/cart_service.py
from decimal import Decimal
from typing import Dict, Any

import requests
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.pricing import (
    CartLine,
    Coupon,
    TotalsBreakdown,
    compute_totals,
    coupon_from_record,
    line_detail,
    money,
)
from app.repos.cart_repo import CartRepo
from app.services.coupon_service import CouponService
from app.services.tax_rate_service import TaxRateService
from app.services.woocommerce_client import CatalogProduct, WooCommerceClient
from app.utils.logging import get_logger

logger = get_logger(__name__)

ACTIVE = "ACTIVE"
CHECKED_OUT = "CHECKED_OUT"


def coupon_to_snapshot(coupon: Coupon) -> dict:
    def _s(v):
        return None if v is None else str(v)

    return {
        "code": coupon.code,
        "discount_type": coupon.discount_type,
        "amount": str(coupon.amount),
        "minimum_amount": _s(coupon.minimum_amount),
        "maximum_amount": _s(coupon.maximum_amount),
    }


def coupon_from_snapshot(snapshot: dict | None) -> Coupon | None:
    if not snapshot:
        return None
    return coupon_from_record(**snapshot)


def cart_lines(items: list[CartItemModel]) -> list[CartLine]:
    return [
        CartLine(unit_price=i.unit_price, quantity=i.quantity, regular_price=i.regular_price)
        for i in items
    ]


def price_cart(cart: CartModel, items: list[CartItemModel], tax_rate: Decimal) -> TotalsBreakdown:
    return compute_totals(cart_lines(items), coupon_from_snapshot(cart.coupon), tax_rate)


class CartService:
    """
    Koszyk kasjera (sesja POS).
    commands (create, add, set quantity, remove, coupon, clear) modyfikuja stan,
    query (get) tylko odczyt - sumy liczone od nowa przy kazdym odczycie.
    """

    def __init__(
        self,
        db: Session,
        catalog: WooCommerceClient,
        coupon_service: CouponService,
        tax_rate_service: TaxRateService,
    ):
        self.repo = CartRepo(db)
        self.catalog = catalog
        self.coupon_service = coupon_service
        self.tax_rate_service = tax_rate_service

    #query - odczyt
    def get_cart(self, cart_id: int) -> Dict[str, Any] | None:
        cart = self.repo.get_cart(cart_id)
        if not cart:
            return None

        items = self.repo.get_cart_items(cart_id)
        tax_rate = self.tax_rate_service.get_effective_tax_rate()
        totals = price_cart(cart, items, tax_rate)

        warnings = []
        coupon = coupon_from_snapshot(cart.coupon)
        if coupon and coupon.minimum_amount is not None and totals.subtotal < coupon.minimum_amount:
            warnings.append(
                f"Kupon {coupon.code} wymaga minimalnej kwoty {money(coupon.minimum_amount)}"
            )

        lines = []
        for i, line in zip(items, cart_lines(items)):
            detail = line_detail(line, tax_rate)
            lines.append(
                {
                    "product_id": i.product_id,
                    "name": i.name,
                    "quantity": i.quantity,
                    "mrp": money(detail.mrp),
                    "sale_price": money(detail.sale_price),
                    "tax_portion": detail.tax_portion,
                    "discount_portion": money(detail.discount_portion),
                    "line_total": money(detail.line_total),
                }
            )

        rounded = totals.rounded()
        return {
            "cart_id": cart.id,
            "cashier_name": cart.cashier_name,
            "status": cart.status,
            "items": lines,
            "coupon": cart.coupon,
            "tax_rate": tax_rate,
            "totals": {
                "subtotal": rounded.subtotal,
                "discount": rounded.discount_amount,
                "tax": rounded.tax_total,
                "total": rounded.grand_total,
            },
            "warnings": warnings,
        }

    #commands
    def create_cart(self, cashier_name: str) -> Dict[str, Any]:
        created = self.repo.create_cart(
            CartModel(cashier_name=cashier_name, status=ACTIVE, version=1)
        )
        logger.info(f"Utworzono koszyk {created.id} dla kasjera {cashier_name}")
        return self.get_cart(created.id)

    def add_product(self, cart_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Ilosc musi byc wieksza niz 0")

        cart = self._active_cart(cart_id)

        logger.info(f"Pobieranie produktu {product_id} z WooCommerce")
        try:
            product = self.catalog.fetch_product(product_id)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                raise ValueError(f"Produkt {product_id} nie istnieje") from e
            raise

        return self._add_catalog_product(cart, product, quantity)

    def add_product_by_barcode(self, cart_id: int, barcode: str, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Ilosc musi byc wieksza niz 0")

        cart = self._active_cart(cart_id)

        product = self.catalog.find_product_by_barcode(barcode)
        if product is None:
            raise ValueError(f"Nie znaleziono produktu dla kodu {barcode}")

        return self._add_catalog_product(cart, product, quantity)

    def _add_catalog_product(self, cart: CartModel, product: CatalogProduct, quantity: int) -> Dict[str, Any]:
        cart_id, product_id = cart.id, product.id
        existing_item = self.repo.get_cart_item(cart_id, product_id)
        if existing_item:
            logger.info(
                f"Produkt {product_id} juz jest w koszyku, zwiekszam ilosc "
                f"z {existing_item.quantity} do {existing_item.quantity + quantity}"
            )
            existing_item.quantity += quantity
            #aktualna cena z katalogu
            existing_item.unit_price = product.effective_price
            existing_item.regular_price = product.regular_price
            self.repo.add_cart_item(existing_item)
        else:
            self.repo.add_cart_item(
                CartItemModel(
                    cart_id=cart_id,
                    product_id=product_id,
                    name=product.name,
                    quantity=quantity,
                    unit_price=product.effective_price,
                    regular_price=product.regular_price,
                )
            )

        self._bump_version(cart)
        logger.info(f"Produkt {product_id} dodany do koszyka {cart_id}")
        return self.get_cart(cart_id)

    def set_quantity(self, cart_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        #ponizej 1 sztuki odrzucamy tutaj, silnik cenowy tego nie sprawdza
        if quantity < 1:
            raise ValueError("Ilosc musi byc co najmniej 1 - usun produkt z koszyka")

        cart = self._active_cart(cart_id)
        item = self.repo.get_cart_item(cart_id, product_id)
        if not item:
            raise ValueError(f"Produktu {product_id} nie ma w koszyku")

        item.quantity = quantity
        self.repo.add_cart_item(item)
        self._bump_version(cart)
        return self.get_cart(cart_id)

    def remove_product(self, cart_id: int, product_id: int) -> Dict[str, Any]:
        cart = self._active_cart(cart_id)

        logger.info(f"Usuwanie produktu {product_id} z koszyka {cart_id}")
        if self.repo.delete_cart_item(cart_id, product_id) == 0:
            raise ValueError(f"Produktu {product_id} nie ma w koszyku")

        self._bump_version(cart)
        return self.get_cart(cart_id)

    def apply_coupon(self, cart_id: int, code: str) -> Dict[str, Any]:
        cart = self._active_cart(cart_id)

        coupon = self.coupon_service.find_by_code(code)
        if coupon is None:
            raise ValueError("Kupon nie istnieje lub wygasl")

        #nowy kupon zastepuje poprzedni
        if cart.coupon:
            logger.info(f"Koszyk {cart_id}: kupon {cart.coupon['code']} zastapiony przez {coupon.code}")

        self._bump_version(cart, {"coupon": coupon_to_snapshot(coupon)})
        logger.info(f"Kupon {coupon.code} zastosowany w koszyku {cart_id}")
        return self.get_cart(cart_id)

    def remove_coupon(self, cart_id: int) -> Dict[str, Any]:
        cart = self._active_cart(cart_id)
        self._bump_version(cart, {"coupon": None})
        return self.get_cart(cart_id)

    def clear_cart(self, cart_id: int) -> Dict[str, Any]:
        cart = self._active_cart(cart_id)

        removed = self.repo.delete_cart_items(cart_id)
        self._bump_version(cart, {"coupon": None})

        logger.info(f"Koszyk {cart_id} wyczyszczony ({removed} pozycji)")
        return self.get_cart(cart_id)

    def _active_cart(self, cart_id: int) -> CartModel:
        cart = self.repo.get_cart(cart_id)
        if not cart:
            raise ValueError("Koszyk nie istnieje")
        if cart.status != ACTIVE:
            raise ValueError("Koszyk nie moze byc modyfikowany")
        return cart

    def _bump_version(self, cart: CartModel, new_data: dict | None = None) -> None:
        # Optimistic locking
        # np w bazie update set version 2 where id 1 and version 1
        data = {"version": cart.version + 1, **(new_data or {})}
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data=data,
        )

        if rowcount == 0:
            self.repo.rollback()
            raise RuntimeError(
                "Konflikt wspolbieznosci - koszyk zostal zmodyfikowany przez inna operacje"
            )

        self.repo.commit()
