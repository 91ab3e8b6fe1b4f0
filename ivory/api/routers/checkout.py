# ivory/api/routers/checkout.py
from fastapi import APIRouter, Depends

from ivory.api.deps import get_order_service, require_user
from ivory.domain.schemas import CheckoutOut
from ivory.services.order_service import OrderService

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.get("", response_model=CheckoutOut)
def get_checkout(
    user_id: int = Depends(require_user),
    svc: OrderService = Depends(get_order_service),
):
    return {"data": svc.get_checkout_summary(user_id)}
