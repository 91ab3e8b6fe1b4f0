from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship

from ivory.data.database import Base


class CollectionModel(Base):
    __tablename__ = "collections"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)

    # hard delete: removing a collection removes its products
    products = relationship(
        "ProductModel",
        back_populates="collection",
        cascade="all, delete",
    )
