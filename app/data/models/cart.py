#app/data/models/cart.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship

from app.data.database import Base


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    cashier_name = Column(String, nullable=False)

    status = Column(String, nullable=False, default="ACTIVE")  # ACTIVE, CHECKED_OUT
    version = Column(Integer, nullable=False, default=1)

    #snapshot zastosowanego kuponu (tylko jeden na raz)
    coupon = Column(JSON(none_as_null=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemModel.id",
    )
