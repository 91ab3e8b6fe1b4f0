# ivory/repos/cart_repo.py
from sqlalchemy import select, delete
from sqlalchemy.orm import Session, selectinload

from ivory.data.models.cart import CartModel
from ivory.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        # items + products loaded up front, every read joins them
        return self.db.execute(
            select(CartModel)
            .options(selectinload(CartModel.items).selectinload(CartItemModel.product))
            .where(CartModel.user_id == user_id)
            .order_by(CartModel.id)
            .limit(1)
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def delete_cart(self, cart_id: int) -> int:
        """No commit; runs inside the payment confirmation transaction."""
        self.db.execute(delete(CartItemModel).where(CartItemModel.cart_id == cart_id))
        result = self.db.execute(delete(CartModel).where(CartModel.id == cart_id))
        return result.rowcount

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
