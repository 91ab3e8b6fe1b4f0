from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, JSON
from sqlalchemy.orm import relationship

from ivory.data.database import Base
from ivory.domain.order_status import PENDING_PAYMENT


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    # null for guest orders; those carry contact details in shipping_info
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    # correlation only, the cart is deleted once the order is paid
    cart_id = Column(Integer, nullable=True)

    shipping_info = Column(JSON, nullable=True)

    payment_method = Column(String, nullable=True)
    payment_reference = Column(String, nullable=True, unique=True, index=True)
    payment_channel = Column(String, nullable=True)
    payment_status = Column(String, nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    shipping_cost = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)

    status = Column(String, nullable=False, default=PENDING_PAYMENT, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user = relationship("UserModel")
    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
