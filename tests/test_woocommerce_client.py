from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests

from app.domain.errors import UnsupportedCouponType
from app.domain.pricing import PercentageCoupon
from app.services.woocommerce_client import WooCommerceClient, effective_price


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}", response=self)


def make_client(payload, status_code=200):
    session = MagicMock()
    session.get.return_value = FakeResponse(payload, status_code)
    session.post.return_value = FakeResponse(payload, status_code)
    client = WooCommerceClient(
        base_url="https://shop.example.com/",
        consumer_key="ck",
        consumer_secret="cs",
        session=session,
    )
    return client, session


def test_requests_go_to_wc_v3_with_basic_auth():
    client, session = make_client([])
    client.get_explicit_tax_rates()

    session.get.assert_called_once_with(
        "https://shop.example.com/wp-json/wc/v3/taxes",
        params=None,
        auth=("ck", "cs"),
        timeout=client.timeout,
    )


def test_sample_keeps_only_taxable_priced_products():
    client, session = make_client(
        [
            {"name": "a", "tax_status": "taxable", "price": "118", "regular_price": "100"},
            {"name": "b", "tax_status": "none", "price": "10", "regular_price": "10"},
            {"name": "c", "tax_status": "taxable", "price": "", "regular_price": "10"},
            {"name": "d", "tax_status": "taxable", "price": "0", "regular_price": "10"},
            {"name": "e", "tax_status": "taxable", "price": "5", "regular_price": ""},
        ]
    )

    pairs = client.sample_taxable_products(10)

    assert [p.name for p in pairs] == ["a"]
    assert pairs[0].regular_price == Decimal("100")
    assert pairs[0].effective_price == Decimal("118")
    assert session.get.call_args.kwargs["params"] == {"per_page": 10, "status": "publish"}


def test_explicit_rates_map_class():
    client, _ = make_client([{"rate": "18.0000", "class": "standard"}, {"rate": "5.0000", "class": None}])

    rates = client.get_explicit_tax_rates()

    assert [(r.rate, r.tax_class) for r in rates] == [("18.0000", "standard"), ("5.0000", "")]


def test_store_locale_from_general_settings():
    client, _ = make_client(
        [
            {"id": "woocommerce_store_city", "value": "Pune"},
            {"id": "woocommerce_default_country", "value": "IN:MH"},
        ]
    )
    assert client.get_store_locale() == "IN:MH"


def test_store_locale_missing():
    client, _ = make_client([{"id": "woocommerce_store_city", "value": "Pune"}])
    assert client.get_store_locale() is None


def test_fetch_product_prefers_lower_sale_price():
    client, _ = make_client(
        {"id": 7, "name": "Mug", "regular_price": "59.00", "sale_price": "50.00", "sku": "MUG-1"}
    )

    p = client.fetch_product(7)

    assert p.effective_price == Decimal("50.00")
    assert p.regular_price == Decimal("59.00")
    assert p.sku == "MUG-1"


def test_fetch_product_without_price_is_rejected():
    client, _ = make_client({"id": 7, "name": "Mug", "regular_price": "", "price": ""})
    with pytest.raises(ValueError):
        client.fetch_product(7)


def test_client_errors_are_raised_without_retry():
    client, session = make_client({"code": "woocommerce_rest_product_invalid_id"}, status_code=404)

    with pytest.raises(requests.HTTPError):
        client.fetch_product(999)
    assert session.get.call_count == 1


def test_effective_price_ignores_higher_sale_price():
    assert effective_price(Decimal("10"), Decimal("12")) == Decimal("10")
    assert effective_price(Decimal("10"), None) == Decimal("10")


def test_find_coupon_by_code():
    client, session = make_client(
        [
            {
                "code": "ten",
                "discount_type": "percent",
                "amount": "10.00",
                "minimum_amount": "0.00",
                "maximum_amount": "",
                "date_expires": None,
            }
        ]
    )
    with pytest.raises(UnsupportedCouponType):
        client.find_coupon_by_code("ten")

    session.get.return_value = FakeResponse(
        [{"code": "ten", "discount_type": "percentage", "amount": "10.00", "maximum_amount": "25"}]
    )
    record = client.find_coupon_by_code("ten")

    assert isinstance(record.coupon, PercentageCoupon)
    assert record.coupon.maximum_amount == Decimal("25")
    assert session.get.call_args.kwargs["params"] == {"code": "ten"}


def test_unknown_coupon_is_none():
    client, _ = make_client([])
    assert client.find_coupon_by_code("nope") is None


def test_create_order_returns_woocommerce_id():
    client, session = make_client({"id": 321, "number": "321"})

    assert client.create_order({"status": "completed"}) == 321
    assert session.post.call_args.kwargs["json"] == {"status": "completed"}


def test_configured_requires_url_and_keys():
    assert not WooCommerceClient(base_url="", consumer_key="", consumer_secret="").configured


def test_zero_coupon_limits_mean_no_limit():
    #tak WooCommerce zwraca kupon bez minimum i maksimum
    client, _ = make_client(
        [
            {
                "id": 12,
                "code": "ten",
                "discount_type": "percentage",
                "amount": "10.00",
                "minimum_amount": "0.00",
                "maximum_amount": "0.00",
                "date_expires": None,
            }
        ]
    )

    coupon = client.find_coupon_by_code("ten").coupon

    assert coupon.minimum_amount is None
    assert coupon.maximum_amount is None
    assert coupon.discount_amount(Decimal("236")) == Decimal("23.6")


def test_barcode_found_in_yith_meta():
    client, session = make_client([])
    session.get.side_effect = [
        FakeResponse(
            [
                {"id": 3, "name": "Other", "regular_price": "5", "sku": "X", "meta_data": []},
                {
                    "id": 7,
                    "name": "Mug",
                    "regular_price": "59.00",
                    "sku": "MUG-1",
                    "meta_data": [{"key": "_ywbc_barcode_display_value", "value": "5901234123457"}],
                },
            ]
        ),
    ]

    p = client.find_product_by_barcode(" 5901234123457 ")

    assert p.id == 7
    assert p.barcode == "5901234123457"
    assert session.get.call_args.kwargs["params"] == {
        "meta_key": "_ywbc_barcode_display_value",
        "meta_value": "5901234123457",
    }


def test_barcode_falls_back_to_sku():
    client, session = make_client([])
    session.get.side_effect = [
        FakeResponse([]),
        FakeResponse([]),
        FakeResponse([{"id": 9, "name": "Pen", "regular_price": "12.00", "sku": "PEN-9"}]),
    ]

    p = client.find_product_by_barcode("PEN-9")

    assert p.id == 9
    assert p.barcode == "PEN-9"
    assert session.get.call_args.kwargs["params"] == {"sku": "PEN-9"}


def test_unknown_barcode_is_none():
    client, session = make_client([])

    assert client.find_product_by_barcode("000") is None
    assert session.get.call_count == 3
    assert client.find_product_by_barcode("  ") is None
    assert session.get.call_count == 3
