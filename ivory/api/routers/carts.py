# ivory/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ivory.api.deps import require_user
from ivory.data.database import get_db
from ivory.domain.schemas import (
    CartAddIn,
    CartAddOut,
    CartMutationOut,
    CartOut,
    CartRemoveIn,
    CartUpdateIn,
)
from ivory.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=CartOut)
def get_cart(user_id: int = Depends(require_user), db: Session = Depends(get_db)):
    return get_service(db).get_cart(user_id)


@router.post("/add", response_model=CartAddOut)
def add_item(
    payload: CartAddIn,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    cart = get_service(db).add_item(user_id, payload.product_id, payload.quantity)
    return {"cart_count": cart["cart_count"]}


@router.post("/update", response_model=CartMutationOut)
def update_item(
    payload: CartUpdateIn,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    return get_service(db).update_item(user_id, payload.product_id, payload.action)


@router.post("/remove", response_model=CartMutationOut)
def remove_item(
    payload: CartRemoveIn,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    return get_service(db).remove_item(user_id, payload.product_id)
