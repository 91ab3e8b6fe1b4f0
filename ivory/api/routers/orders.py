# ivory/api/routers/orders.py
from fastapi import APIRouter, Depends

from ivory.api.deps import get_order_service, get_principal
from ivory.domain.principal import Principal
from ivory.domain.schemas import OrderDetailEnvelope
from ivory.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/{order_id}", response_model=OrderDetailEnvelope)
def get_order(
    order_id: int,
    principal: Principal = Depends(get_principal),
    svc: OrderService = Depends(get_order_service),
):
    """Owner or admin."""
    return {"data": svc.get_order_detail(order_id, principal)}
