# app/tasks/sync_pending.py
from app.celery_worker import celery_app
from app.data.database import SessionLocal
from app.repos.order_repo import OrderRepo
from app.services.order_sync_service import sync_order
from app.services.woocommerce_client import WooCommerceClient
from app.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="app.tasks.sync_pending.sync_pending_orders_task")
def sync_pending_orders_task():
    logger.info("Sync pending orders task started")

    client = WooCommerceClient()
    if not client.configured:
        logger.info("WooCommerce nieskonfigurowany, pomijam")
        return 0

    db = SessionLocal()
    try:
        pending = [o.id for o in OrderRepo(db).get_unsynced_orders()]
        logger.info(f"Found {len(pending)} unsynced orders")

        synced = sum(1 for order_id in pending if sync_order(db, client, order_id))
    finally:
        db.close()

    return synced
