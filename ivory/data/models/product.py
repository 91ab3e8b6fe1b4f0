from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from ivory.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("price > 0", name="ck_product_price_positive"),)

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String, nullable=True)

    collection_id = Column(Integer, ForeignKey("collections.id", ondelete="CASCADE"), nullable=False, index=True)

    #stock; no floor at decrement time, only the checkout check guards it
    quantity = Column(Integer, nullable=False, default=0)
    sales_count = Column(Integer, nullable=False, default=0)

    collection = relationship("CollectionModel", back_populates="products")
    cart_items = relationship(
        "CartItemModel",
        back_populates="product",
        cascade="all, delete",
    )
    # order lines keep their frozen name/price; the link is nulled on delete
    order_items = relationship("OrderItemModel", back_populates="product")
