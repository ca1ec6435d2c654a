# app/celery_worker.py
from celery import Celery

from app.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, ORDER_SYNC_INTERVAL_SECONDS

celery_app = Celery(
    "pos",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAŻNE: Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = (
    "app.services.order_sync_service",
    "app.tasks.sync_pending",
)

# zamowienia, ktore nie poszly od razu do WooCommerce
celery_app.conf.beat_schedule = {
    "sync-pending-orders": {
        "task": "app.tasks.sync_pending.sync_pending_orders_task",
        "schedule": ORDER_SYNC_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
