from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Boolean, JSON
from datetime import datetime, timezone

from app.data.database import Base

class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id"), nullable=False)

    status = Column(String, nullable=False, default="completed")

    #kwoty brutto, podatek jest czescia total
    subtotal = Column(Numeric(10, 2), nullable=False)
    discount_total = Column(Numeric(10, 2), nullable=False, default=0)
    tax_total = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)
    tax_rate = Column(Numeric(7, 4), nullable=False, default=0)

    coupon_code = Column(String, nullable=True)
    cashier_name = Column(String, nullable=False)
    customer_name = Column(String, nullable=False, default="Walk-in Customer")
    payment_method = Column(String, nullable=False, default="cash")
    line_items = Column(JSON, nullable=False)

    #lustrzane zamowienie w WooCommerce
    synced = Column(Boolean, nullable=False, default=False)
    woocommerce_id = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
