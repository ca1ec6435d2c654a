# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal
from decimal import Decimal
from datetime import datetime


class CreateCartIn(BaseModel):
    """Schema dla otwarcia koszyka przez kasjera."""

    cashier_name: str = Field(..., min_length=1, max_length=100, description="Kasjer")


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu WooCommerce (musi być > 0)")
    quantity: int = Field(1, gt=0, description="Ilość produktu (musi być > 0)")


class BarcodeItemIn(BaseModel):
    """Schema dla dodawania produktu ze skanera."""

    barcode: str = Field(..., min_length=1, max_length=100, description="Kod kreskowy lub SKU")
    quantity: int = Field(1, gt=0)


class QuantityIn(BaseModel):
    # < 1 odrzuca serwis koszyka (400), nie walidacja
    quantity: int


class CouponIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=100)


class CheckoutIn(BaseModel):
    payment_method: Literal["cash", "card", "upi"] = "cash"
    customer_name: str | None = Field(None, max_length=200)


class LineDetailOut(BaseModel):
    quantity: int
    mrp: Decimal
    sale_price: Decimal
    tax_portion: Decimal
    discount_portion: Decimal
    line_total: Decimal


class CartLineOut(LineDetailOut):
    product_id: int
    name: str


class ProductOut(BaseModel):
    id: int
    name: str
    regular_price: Decimal
    sale_price: Decimal | None = None
    price: Decimal
    sku: str | None = None
    barcode: str | None = None


class TotalsOut(BaseModel):
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal


class CouponOut(BaseModel):
    code: str
    discount_type: str
    amount: Decimal
    minimum_amount: Decimal | None = None
    maximum_amount: Decimal | None = None

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    cart_id: int
    cashier_name: str
    status: str
    items: List[CartLineOut]
    coupon: CouponOut | None = None
    tax_rate: Decimal
    totals: TotalsOut
    warnings: List[str] = []


class OrderLineOut(BaseModel):
    product_id: int
    name: str
    quantity: int
    price: Decimal
    regular_price: Decimal
    total: Decimal


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    cart_id: int
    status: str
    subtotal: Decimal
    discount_total: Decimal
    tax_total: Decimal
    total: Decimal
    tax_rate: Decimal
    coupon_code: str | None = None
    cashier_name: str
    customer_name: str
    payment_method: str
    line_items: List[OrderLineOut]
    synced: bool
    woocommerce_id: int | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaxRateOut(BaseModel):
    tax_rate: Decimal


class PricingLineIn(BaseModel):
    unit_price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    regular_price: Decimal | None = Field(None, ge=0)


class PricingIn(BaseModel):
    """Wycena ad-hoc, bez koszyka w bazie."""

    lines: List[PricingLineIn]
    coupon_code: str | None = None
    tax_rate: Decimal | None = Field(None, ge=0, le=100, description="Brak = stawka wykryta ze sklepu")


class PricingOut(BaseModel):
    tax_rate: Decimal
    coupon_code: str | None = None
    lines: List[LineDetailOut]
    totals: TotalsOut
