# app/services/pricing_service.py
from decimal import Decimal

from app.domain.pricing import CartLine, compute_totals, line_detail, money
from app.services.coupon_service import CouponService
from app.services.tax_rate_service import TaxRateService


class PricingService:
    """Wycena listy pozycji bez zapisu (podglad, kalkulator na kasie)."""

    def __init__(self, coupon_service: CouponService, tax_rate_service: TaxRateService):
        self.coupon_service = coupon_service
        self.tax_rate_service = tax_rate_service

    def quote(self, lines: list[CartLine], coupon_code: str | None = None, tax_rate: Decimal | None = None):
        coupon = None
        if coupon_code:
            coupon = self.coupon_service.find_by_code(coupon_code)
            if coupon is None:
                raise ValueError("Kupon nie istnieje lub wygasl")

        if tax_rate is None:
            tax_rate = self.tax_rate_service.get_effective_tax_rate()

        totals = compute_totals(lines, coupon, tax_rate).rounded()
        details = []
        for line in lines:
            d = line_detail(line, tax_rate)
            details.append(
                {
                    "quantity": line.quantity,
                    "mrp": money(d.mrp),
                    "sale_price": money(d.sale_price),
                    "tax_portion": d.tax_portion,
                    "discount_portion": money(d.discount_portion),
                    "line_total": money(d.line_total),
                }
            )

        return {
            "tax_rate": tax_rate,
            "coupon_code": coupon.code if coupon else None,
            "lines": details,
            "totals": {
                "subtotal": totals.subtotal,
                "discount": totals.discount_amount,
                "tax": totals.tax_total,
                "total": totals.grand_total,
            },
        }
