# every model is imported here so SQLAlchemy registers it on Base.metadata

from ivory.data.models.user import UserModel
from ivory.data.models.admin import AdminModel
from ivory.data.models.collection import CollectionModel
from ivory.data.models.product import ProductModel
from ivory.data.models.cart import CartModel
from ivory.data.models.cart_item import CartItemModel
from ivory.data.models.order import OrderModel
from ivory.data.models.order_item import OrderItemModel

__all__ = [
    "UserModel",
    "AdminModel",
    "CollectionModel",
    "ProductModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
]
