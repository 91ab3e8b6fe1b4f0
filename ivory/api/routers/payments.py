# ivory/api/routers/payments.py
import json
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool

from ivory.api.deps import get_order_service, require_user
from ivory.domain.schemas import PaymentInitiateIn, PaymentInitiateOut
from ivory.services.order_service import OrderService
from ivory.services.payment_gateway import verify_webhook_signature
from ivory.utils.settings import FRONTEND_URL, PAYSTACK_SECRET_KEY
from ivory.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])

SIGNATURE_HEADER = "x-paystack-signature"


@router.post("/initiate", response_model=PaymentInitiateOut)
def initiate_payment(
    payload: PaymentInitiateIn,
    user_id: int = Depends(require_user),
    svc: OrderService = Depends(get_order_service),
):
    return svc.initiate_checkout(user_id, payload)


@router.get("/verify")
def verify_payment(
    reference: Optional[str] = Query(None),
    trxref: Optional[str] = Query(None),
    svc: OrderService = Depends(get_order_service),
):
    """Gateway redirect target. Always answers with a redirect to the storefront."""
    path = svc.confirm_from_redirect(reference or trxref)
    return RedirectResponse(url=f"{FRONTEND_URL.rstrip('/')}{path}", status_code=302)


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    svc: OrderService = Depends(get_order_service),
):
    raw_body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    if not signature:
        logger.warning("Webhook without signature rejected")
        return Response(status_code=400)

    if not verify_webhook_signature(raw_body, signature, PAYSTACK_SECRET_KEY):
        logger.warning("Webhook with invalid signature rejected")
        return Response(status_code=401)

    # verified: always acknowledge so the gateway does not redeliver
    try:
        await run_in_threadpool(svc.handle_webhook_event, json.loads(raw_body))
    except Exception as e:
        logger.exception(f"Webhook processing failed: {e}")

    return Response(status_code=200)
