# app/services/coupon_service.py
from datetime import datetime, timezone

from app.domain.errors import UnsupportedCouponType
from app.domain.pricing import Coupon
from app.services.woocommerce_client import CouponRecord, WooCommerceClient
from app.utils.logging import get_logger

logger = get_logger(__name__)


def _is_expired(date_expires: str | None, now: datetime) -> bool:
    if not date_expires:
        return False
    expires = datetime.fromisoformat(date_expires)
    #woocommerce date_expires jest bez strefy (czas sklepu), traktujemy jako UTC
    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=timezone.utc)
    return expires < now


class CouponService:
    def __init__(self, client: WooCommerceClient):
        self.client = client

    def find_by_code(self, code: str, now: datetime | None = None) -> Coupon | None:
        code = (code or "").strip()
        if not code:
            return None

        try:
            record: CouponRecord | None = self.client.find_coupon_by_code(code)
        except UnsupportedCouponType as e:
            logger.warning(f"Kupon {code}: {e}")
            return None

        if record is None:
            logger.info(f"Kupon {code} nie istnieje")
            return None

        if _is_expired(record.date_expires, now or datetime.now(timezone.utc)):
            logger.info(f"Kupon {code} wygasl ({record.date_expires})")
            return None

        return record.coupon
