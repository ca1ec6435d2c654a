# app/services/order_service.py
from kombu.exceptions import OperationalError
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.domain.pricing import money
from app.repos.cart_repo import CartRepo
from app.repos.order_repo import OrderRepo
from app.services.cart_service import ACTIVE, CHECKED_OUT, coupon_from_snapshot, price_cart
from app.services.order_sync_service import OrderSyncService
from app.services.tax_rate_service import TaxRateService
from app.utils.logging import get_logger

logger = get_logger(__name__)

WALK_IN_CUSTOMER = "Walk-in Customer"


def order_to_dict(order: OrderModel) -> dict:
    return {
        "id": order.id,
        "cart_id": order.cart_id,
        "status": order.status,
        "subtotal": order.subtotal,
        "discount_total": order.discount_total,
        "tax_total": order.tax_total,
        "total": order.total,
        "tax_rate": order.tax_rate,
        "coupon_code": order.coupon_code,
        "cashier_name": order.cashier_name,
        "customer_name": order.customer_name,
        "payment_method": order.payment_method,
        "line_items": order.line_items,
        "synced": order.synced,
        "woocommerce_id": order.woocommerce_id,
        "created_at": order.created_at,
    }


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.
    Kwoty zamowienia pochodza z silnika cenowego w chwili checkoutu.
    """

    def __init__(self, db: Session, tax_rate_service: TaxRateService):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.tax_rate_service = tax_rate_service
        self.sync_service = OrderSyncService()

    def checkout(self, cart_id: int, payment_method: str, customer_name: str | None = None):
        """
        Use Case: checkout koszyka.

        1. Weryfikuje, czy koszyk jest aktywny i niepusty
        2. Liczy sumy (rabat, VAT wyciagniety z brutto)
        3. Tworzy zamówienie, zamyka koszyk i zdejmuje kupon
        4. Zleca sync do WooCommerce (async)
        """
        cart = self.cart_repo.get_cart(cart_id)

        if not cart:
            raise ValueError("Koszyk nie istnieje")

        if cart.status != ACTIVE:
            raise ValueError("Koszyk nie jest aktywny")

        items = self.cart_repo.get_cart_items(cart_id)
        if not items:
            raise ValueError("Nie można zamknąć pustego koszyka")

        tax_rate = self.tax_rate_service.get_effective_tax_rate()
        totals = price_cart(cart, items, tax_rate).rounded()
        coupon = coupon_from_snapshot(cart.coupon)

        order = self.repo.create_order(
            OrderModel(
                cart_id=cart.id,
                status="completed",
                subtotal=totals.subtotal,
                discount_total=totals.discount_amount,
                tax_total=totals.tax_total,
                total=totals.grand_total,
                tax_rate=tax_rate,
                coupon_code=coupon.code if coupon else None,
                cashier_name=cart.cashier_name,
                customer_name=(customer_name or "").strip() or WALK_IN_CUSTOMER,
                payment_method=payment_method,
                line_items=[
                    {
                        "product_id": i.product_id,
                        "name": i.name,
                        "quantity": i.quantity,
                        "price": str(money(i.unit_price)),
                        "regular_price": str(money(i.regular_price)),
                        "total": str(money(i.unit_price * i.quantity)),
                    }
                    for i in items
                ],
                synced=False,
            )
        )

        rowcount = self.cart_repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={"status": CHECKED_OUT, "coupon": None, "version": cart.version + 1},
        )
        if rowcount == 0:
            self.db.rollback()
            raise RuntimeError(
                "Konflikt wspolbieznosci - koszyk zostal zmodyfikowany przez inna operacje"
            )

        self.db.commit()
        self.db.refresh(order)

        logger.info(f"Order {order.id} created from cart {cart_id}, total {order.total}")

        try:
            self.sync_service.schedule(order.id)
        except OperationalError as e:
            #zamowienie jest zapisane, wysle je sync_pending_orders_task
            logger.warning(f"Nie udalo sie zlecic synchronizacji zamowienia {order.id}: {e}")
        return order_to_dict(order)

    def get_order(self, order_id: int):
        order = self.repo.get_order(order_id)

        if not order:
            raise ValueError("Zamówienie nie istnieje")

        return order_to_dict(order)

    def list_orders(self, limit: int = 50):
        return [order_to_dict(o) for o in self.repo.get_orders(limit)]

    def list_unsynced_orders(self, limit: int = 50):
        return [order_to_dict(o) for o in self.repo.get_unsynced_orders(limit)]
