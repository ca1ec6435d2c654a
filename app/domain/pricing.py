# app/domain/pricing.py
"""
Silnik cenowy POS.

Ceny sa zawsze brutto (tax-inclusive): podatek jest wyciagany z kwoty
po rabacie, nigdy doliczany. Wszystko liczone na Decimal w pelnej
precyzji, zaokraglenie ROUND_HALF_UP tylko przy wyciaganiu podatku
i przy kopii do wyswietlenia.

Funkcje sa czyste (brak I/O), wiec mozna je wolac z dowolnej liczby
requestow jednoczesnie.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import ClassVar, Iterable, Union

from app.domain.errors import InputError, UnsupportedCouponType
from app.utils.settings import MONEY_DECIMALS

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
CENT = ONE.scaleb(-MONEY_DECIMALS)


def to_decimal(value, field: str = "value") -> Decimal:
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            #przez str, zeby float 0.1 nie zamienil sie w 0.1000000000000000055...
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise InputError(f"{field} nie jest liczba: {value!r}") from e

    if not result.is_finite():
        raise InputError(f"{field} nie jest liczba: {value!r}")
    return result


def money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _optional_decimal(value, field: str) -> Decimal | None:
    #woocommerce zwraca "" zamiast null
    if value is None or value == "":
        return None
    return to_decimal(value, field)


@dataclass(frozen=True)
class CartLine:
    unit_price: Decimal
    quantity: int
    regular_price: Decimal | None = None

    def __post_init__(self):
        unit_price = to_decimal(self.unit_price, "unit_price")
        regular_price = _optional_decimal(self.regular_price, "regular_price")

        if isinstance(self.quantity, bool) or int(self.quantity) != self.quantity:
            raise InputError(f"quantity musi byc liczba calkowita: {self.quantity!r}")
        if self.quantity < 1:
            raise InputError("quantity musi byc >= 1")
        if unit_price < 0:
            raise InputError("unit_price nie moze byc ujemna")
        if regular_price is not None and regular_price < 0:
            raise InputError("regular_price nie moze byc ujemna")

        object.__setattr__(self, "unit_price", unit_price)
        object.__setattr__(self, "quantity", int(self.quantity))
        object.__setattr__(self, "regular_price", regular_price)

    @property
    def mrp(self) -> Decimal:
        return self.regular_price if self.regular_price is not None else self.unit_price

    @property
    def total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class _CouponRule(ABC):
    code: str
    amount: Decimal
    minimum_amount: Decimal | None = None
    maximum_amount: Decimal | None = None

    discount_type: ClassVar[str] = ""

    def __post_init__(self):
        amount = to_decimal(self.amount, "amount")
        if amount < 0:
            raise InputError("kwota kuponu nie moze byc ujemna")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "minimum_amount", _optional_decimal(self.minimum_amount, "minimum_amount"))
        object.__setattr__(self, "maximum_amount", _optional_decimal(self.maximum_amount, "maximum_amount"))

    @abstractmethod
    def _raw_discount(self, subtotal: Decimal) -> Decimal:
        """Rabat przed regulami min/max."""

    def discount_amount(self, subtotal: Decimal) -> Decimal:
        """Kwota rabatu dla danej sumy koszyka, po regulach min/max.

        Rabat nigdy nie przekracza sumy koszyka (max 100%), a limit
        maximum_amount daje dokladnie maximum_amount.
        """
        if subtotal <= 0:
            return ZERO

        #ponizej minimum kupon po cichu nie dziala
        if self.minimum_amount is not None and subtotal < self.minimum_amount:
            return ZERO

        discount = min(self._raw_discount(subtotal), subtotal)

        if self.maximum_amount is not None and discount > self.maximum_amount:
            discount = self.maximum_amount
        return discount

    def discount_percent(self, subtotal: Decimal) -> Decimal:
        if subtotal <= 0:
            return ZERO
        return self.discount_amount(subtotal) / subtotal * HUNDRED


@dataclass(frozen=True)
class PercentageCoupon(_CouponRule):
    discount_type: ClassVar[str] = "percentage"

    def _raw_discount(self, subtotal: Decimal) -> Decimal:
        return subtotal * self.amount / HUNDRED


@dataclass(frozen=True)
class FixedCartCoupon(_CouponRule):
    discount_type: ClassVar[str] = "fixed_cart"

    def _raw_discount(self, subtotal: Decimal) -> Decimal:
        #rownowazne procentowi amount / subtotal * 100 liczonemu od aktualnej sumy
        return self.amount


Coupon = Union[PercentageCoupon, FixedCartCoupon]

COUPON_TYPES = {cls.discount_type: cls for cls in (PercentageCoupon, FixedCartCoupon)}


def coupon_from_record(
    code: str,
    discount_type: str,
    amount,
    minimum_amount=None,
    maximum_amount=None,
) -> Coupon:
    cls = COUPON_TYPES.get(discount_type)
    if cls is None:
        raise UnsupportedCouponType(f"Nieobslugiwany typ kuponu: {discount_type}")
    return cls(
        code=code,
        amount=amount,
        minimum_amount=minimum_amount,
        maximum_amount=maximum_amount,
    )


@dataclass(frozen=True)
class TotalsBreakdown:
    subtotal: Decimal
    tax_total: Decimal
    discount_amount: Decimal
    grand_total: Decimal

    def rounded(self) -> "TotalsBreakdown":
        """Kopia do wyswietlenia / zapisu w zamowieniu (2 miejsca).

        grand_total liczony z zaokraglonych skladnikow, zeby na paragonie
        suma - rabat zgadzala sie co do grosza.
        """
        subtotal = money(self.subtotal)
        discount = money(self.discount_amount)
        grand = subtotal - discount
        return replace(
            self,
            subtotal=subtotal,
            discount_amount=discount,
            grand_total=grand,
            tax_total=min(money(self.tax_total), grand),
        )


@dataclass(frozen=True)
class LineDetail:
    mrp: Decimal
    sale_price: Decimal
    tax_portion: Decimal
    discount_portion: Decimal
    line_total: Decimal


def extract_tax(amount, tax_rate_percent) -> tuple[Decimal, Decimal]:
    """Rozbija kwote brutto na (netto, podatek)."""
    amount = to_decimal(amount)
    rate = to_decimal(tax_rate_percent, "tax_rate_percent")
    if rate <= 0:
        return money(amount), ZERO

    base = amount / (ONE + rate / HUNDRED)
    tax = amount - base
    return money(base), money(tax)


def subtotal_of(lines: Iterable[CartLine]) -> Decimal:
    return sum((line.total for line in lines), ZERO)


def compute_totals(
    lines: Iterable[CartLine],
    coupon: Coupon | None,
    tax_rate_percent,
) -> TotalsBreakdown:
    subtotal = subtotal_of(lines)

    discount = coupon.discount_amount(subtotal) if coupon is not None else ZERO
    after_discount = subtotal - discount

    _, tax = extract_tax(after_discount, tax_rate_percent)

    #podatek jest w srodku kwoty, NIE doliczamy go
    return TotalsBreakdown(
        subtotal=subtotal,
        tax_total=tax,
        discount_amount=discount,
        grand_total=after_discount,
    )


def line_detail(line: CartLine, tax_rate_percent=0) -> LineDetail:
    mrp = line.mrp
    sale_price = line.unit_price
    line_total = line.total
    _, tax = extract_tax(line_total, tax_rate_percent)

    return LineDetail(
        mrp=mrp,
        sale_price=sale_price,
        tax_portion=tax,
        discount_portion=max(ZERO, mrp - sale_price) * line.quantity,
        line_total=line_total,
    )
