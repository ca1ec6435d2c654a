# app/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session
from app.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_orders(self, limit: int = 50) -> list[OrderModel]:
        #najnowsze pierwsze
        return list(
            self.db.execute(
                select(OrderModel).order_by(OrderModel.id.desc()).limit(limit)
            ).scalars()
        )

    def get_unsynced_orders(self, limit: int = 50) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.synced.is_(False))
                .order_by(OrderModel.id)
                .limit(limit)
            ).scalars()
        )

    def mark_synced(self, order: OrderModel, woocommerce_id: int) -> OrderModel:
        order.synced = True
        order.woocommerce_id = woocommerce_id
        self.db.commit()
        self.db.refresh(order)
        return order
