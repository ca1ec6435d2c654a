from datetime import datetime, timezone

from app.domain.errors import UnsupportedCouponType
from app.services.coupon_service import CouponService
from tests.fakes import FakeCatalog, coupon_record

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def service(**coupons):
    return CouponService(FakeCatalog(coupons=coupons))


def test_found_coupon_is_returned_with_trimmed_code():
    svc = service(TEN=coupon_record("TEN", "percentage", "10"))
    coupon = svc.find_by_code("  TEN ", now=NOW)
    assert coupon.code == "TEN"


def test_blank_code_skips_lookup():
    catalog = FakeCatalog()
    assert CouponService(catalog).find_by_code("   ") is None
    assert catalog.calls == []


def test_unknown_code():
    assert service().find_by_code("NOPE", now=NOW) is None


def test_expired_coupon_is_rejected():
    svc = service(OLD=coupon_record("OLD", "percentage", "10", date_expires="2026-10-01T00:00:00"))
    assert svc.find_by_code("OLD", now=NOW) is None


def test_coupon_expiring_later_is_valid():
    svc = service(NEW=coupon_record("NEW", "fixed_cart", "5", date_expires="2026-12-31T23:59:59"))
    assert svc.find_by_code("NEW", now=NOW) is not None


def test_unsupported_type_is_treated_as_missing():
    class Catalog(FakeCatalog):
        def find_coupon_by_code(self, code):
            raise UnsupportedCouponType("fixed_product")

    assert CouponService(Catalog()).find_by_code("PROD", now=NOW) is None
