# ivory/services/cart_service.py
from decimal import Decimal
from typing import Dict, Any
from sqlalchemy.orm import Session

from ivory.data.models.cart import CartModel
from ivory.data.models.cart_item import CartItemModel
from ivory.domain.errors import InvalidRequestError, NotFoundError
from ivory.repos.cart_repo import CartRepo
from ivory.repos.catalog_repo import ProductRepo
from ivory.utils.formatting import to_money
from ivory.utils.logging import get_logger

logger = get_logger(__name__)

PLACEHOLDER_IMAGE = "/placeholder.svg"
INCREASE = "increase"
DECREASE = "decrease"


def serialize_cart(cart: CartModel | None) -> Dict[str, Any]:
    """Cart lines joined with live product name/price/image, plus recomputed totals."""
    if cart is None or not cart.items:
        return {"cart_items": [], "total": 0.0, "cart_count": 0}

    lines = []
    total = Decimal("0.00")
    count = 0
    for item in cart.items:
        price = to_money(item.product.price)
        line_total = price * item.quantity
        total += line_total
        count += item.quantity
        lines.append(
            {
                "name": item.product.name,
                "price": float(price),
                "quantity": item.quantity,
                "total": float(line_total),
                "product": item.product_id,
                "image_url": item.product.image_url or PLACEHOLDER_IMAGE,
            }
        )

    return {"cart_items": lines, "total": float(total), "cart_count": count}


class CartService:
    """
    One cart per user, located by lookup-or-create.
    query (get) only reads; commands (add, update, remove) return the refreshed cart.
    No locking: two concurrent mutations of the same cart race, the last commit wins.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        return serialize_cart(cart)

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int = 1) -> Dict[str, Any]:
        if quantity <= 0:
            raise InvalidRequestError("Quantity must be greater than 0")

        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            cart = self.repo.create_cart(CartModel(user_id=user_id))
            logger.info(f"Created cart {cart.id} for user {user_id}")

        existing_item = next((i for i in cart.items if i.product_id == product_id), None)
        if existing_item:
            logger.info(
                f"Product {product_id} already in cart {cart.id}, quantity "
                f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
            )
            existing_item.quantity += quantity
        else:
            logger.info(f"Adding product {product_id} x{quantity} to cart {cart.id}")
            cart.items.append(CartItemModel(product_id=product_id, quantity=quantity))

        self.repo.commit()
        return self.get_cart(user_id)

    def update_item(self, user_id: int, product_id: int, action: str) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")

        item = next((i for i in cart.items if i.product_id == product_id), None)
        if not item:
            raise NotFoundError("Item not found in cart")

        if action == INCREASE:
            item.quantity += 1
        elif action == DECREASE:
            # floor at 1, removal is its own command
            item.quantity = max(1, item.quantity - 1)
        else:
            raise InvalidRequestError("Invalid action")

        self.repo.commit()
        logger.info(f"Cart {cart.id}: {action} product {product_id}, quantity now {item.quantity}")
        return self.get_cart(user_id)

    def remove_item(self, user_id: int, product_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")

        item = next((i for i in cart.items if i.product_id == product_id), None)
        if item:
            cart.items.remove(item)
            self.repo.commit()
            logger.info(f"Product {product_id} removed from cart {cart.id}")

        return self.get_cart(user_id)
