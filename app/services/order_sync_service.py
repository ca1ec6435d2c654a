# app/services/order_sync_service.py
from requests import RequestException
from sqlalchemy.orm import Session

from app.celery_worker import celery_app
from app.data.database import SessionLocal
from app.data.models.order import OrderModel
from app.repos.order_repo import OrderRepo
from app.services.woocommerce_client import WooCommerceClient
from app.utils.logging import get_logger

logger = get_logger(__name__)


def build_woocommerce_payload(order: OrderModel) -> dict:
    payload = {
        "status": "completed",
        "set_paid": True,
        "line_items": [
            {
                "product_id": item["product_id"],
                "quantity": item["quantity"],
                "total": item["total"],
            }
            for item in order.line_items
        ],
        "customer_note": f"POS Order - {order.customer_name}",
        "meta_data": [
            {"key": "_pos_order", "value": "true"},
            {"key": "_pos_order_id", "value": str(order.id)},
            {"key": "_cashier_name", "value": order.cashier_name},
            {"key": "_payment_method", "value": order.payment_method},
        ],
    }
    if order.coupon_code:
        payload["coupon_lines"] = [{"code": order.coupon_code}]
    return payload


def sync_order(db: Session, client: WooCommerceClient, order_id: int) -> bool:
    """
    Wysyla zamowienie z POS do WooCommerce.
    Przy bledzie sieci zamowienie zostaje synced=False i wroci w sync_pending_orders_task.
    """
    repo = OrderRepo(db)
    order = repo.get_order(order_id)

    if not order:
        logger.warning(f"Zamowienie {order_id} nie istnieje, pomijam sync")
        return False

    if order.synced:
        return True

    if not client.configured:
        logger.info(f"WooCommerce nieskonfigurowany, zamowienie {order_id} zostaje lokalnie")
        return False

    try:
        woo_id = client.create_order(build_woocommerce_payload(order))
    except RequestException as e:
        logger.error(f"Sync zamowienia {order_id} nieudany: {e}")
        return False

    repo.mark_synced(order, woo_id)
    logger.info(f"Zamowienie {order_id} zsynchronizowane jako WooCommerce #{woo_id}")
    return True


class OrderSyncService:
    """
    Lustrzane zamowienia w WooCommerce.
    Używa Celery, checkout nie czeka na WooCommerce.
    """

    @staticmethod
    def schedule(order_id: int):
        sync_order_task.delay(order_id)


@celery_app.task(name="app.services.order_sync_service.sync_order_task")
def sync_order_task(order_id: int):
    db = SessionLocal()
    try:
        synced = sync_order(db, WooCommerceClient(), order_id)
    finally:
        db.close()
    return {"order_id": order_id, "synced": synced}
