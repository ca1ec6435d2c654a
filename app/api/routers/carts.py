#app/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.dependencies import get_catalog, get_coupon_service, get_tax_rate_service
from app.data.database import get_db
from app.domain.schemas import (
    BarcodeItemIn,
    CartOut,
    CheckoutIn,
    CouponIn,
    CreateCartIn,
    ItemIn,
    OrderOut,
    QuantityIn,
)
from app.services.cart_service import CartService
from app.services.coupon_service import CouponService
from app.services.order_service import OrderService
from app.services.tax_rate_service import TaxRateService
from app.services.woocommerce_client import WooCommerceClient

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(
    db: Session = Depends(get_db),
    catalog: WooCommerceClient = Depends(get_catalog),
    coupon_service: CouponService = Depends(get_coupon_service),
    tax_rate_service: TaxRateService = Depends(get_tax_rate_service),
):
    return CartService(
        db=db,
        catalog=catalog,
        coupon_service=coupon_service,
        tax_rate_service=tax_rate_service,
    )


def _run(fn, *args):
    try:
        return fn(*args)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/", response_model=CartOut, status_code=201)
def create_cart(payload: CreateCartIn, svc: CartService = Depends(get_service)):
    return svc.create_cart(payload.cashier_name)


@router.get("/{cart_id}", response_model=CartOut)
def get_cart(cart_id: int, svc: CartService = Depends(get_service)):
    cart = svc.get_cart(cart_id)
    if not cart:
        raise HTTPException(status_code=404, detail="Koszyk nie znaleziony")
    return cart


@router.post("/{cart_id}/items", response_model=CartOut)
def add_item(cart_id: int, payload: ItemIn, svc: CartService = Depends(get_service)):
    return _run(svc.add_product, cart_id, payload.product_id, payload.quantity)


@router.post("/{cart_id}/items/barcode", response_model=CartOut)
def add_item_by_barcode(cart_id: int, payload: BarcodeItemIn, svc: CartService = Depends(get_service)):
    return _run(svc.add_product_by_barcode, cart_id, payload.barcode, payload.quantity)


@router.patch("/{cart_id}/items/{product_id}", response_model=CartOut)
def set_quantity(
    cart_id: int,
    product_id: int,
    payload: QuantityIn,
    svc: CartService = Depends(get_service),
):
    return _run(svc.set_quantity, cart_id, product_id, payload.quantity)


@router.delete("/{cart_id}/items/{product_id}", response_model=CartOut)
def remove_item(cart_id: int, product_id: int, svc: CartService = Depends(get_service)):
    return _run(svc.remove_product, cart_id, product_id)


@router.post("/{cart_id}/coupon", response_model=CartOut)
def apply_coupon(cart_id: int, payload: CouponIn, svc: CartService = Depends(get_service)):
    return _run(svc.apply_coupon, cart_id, payload.code)


@router.delete("/{cart_id}/coupon", response_model=CartOut)
def remove_coupon(cart_id: int, svc: CartService = Depends(get_service)):
    return _run(svc.remove_coupon, cart_id)


@router.post("/{cart_id}/clear", response_model=CartOut)
def clear_cart(cart_id: int, svc: CartService = Depends(get_service)):
    return _run(svc.clear_cart, cart_id)


@router.post("/{cart_id}/checkout", response_model=OrderOut, status_code=201)
def checkout(
    cart_id: int,
    payload: CheckoutIn,
    db: Session = Depends(get_db),
    tax_rate_service: TaxRateService = Depends(get_tax_rate_service),
):
    """
    Zamyka koszyk i tworzy zamówienie.
    Sync do WooCommerce idzie asynchronicznie.
    """
    svc = OrderService(db, tax_rate_service)
    return _run(svc.checkout, cart_id, payload.payment_method, payload.customer_name)
