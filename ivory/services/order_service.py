# ivory/services/order_service.py
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from ivory.data.models.order import OrderModel
from ivory.data.models.order_item import OrderItemModel
from ivory.domain.errors import (
    AccessDeniedError,
    AuthenticationError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    PaymentGatewayError,
)
from ivory.domain.order_status import (
    ALLOWED_STATUSES,
    FAILED,
    PAID_STATUSES,
    PAYMENT_FAILED,
    PAYMENT_INIT_FAILED,
    PAYMENT_PAID,
    PAYMENT_PENDING,
    PAYMENT_VERIFY_ERROR,
    PENDING_PAYMENT,
    PROCESSING,
    can_transition,
)
from ivory.domain.principal import Principal
from ivory.domain.schemas import PaymentInitiateIn
from ivory.repos.cart_repo import CartRepo
from ivory.repos.catalog_repo import ProductRepo
from ivory.repos.order_repo import OrderRepo
from ivory.repos.user_repo import UserRepo
from ivory.services.cart_service import serialize_cart
from ivory.services.notification_service import NotificationService
from ivory.services.payment_gateway import PaymentVerification
from ivory.utils.formatting import format_date, format_naira, to_money
from ivory.utils.settings import API_BASE_URL, CHECKOUT_LOCK_TTL_SECONDS, PAYMENT_CURRENCY
from ivory.utils.logging import get_logger

logger = get_logger(__name__)

PAYMENT_FAILED_PATH = "/payment-failed"
GATEWAY_METHOD = "paystack"
MANUAL_METHOD = "manual"

# gateway statuses that end a transaction without funds
FAILED_GATEWAY_STATUSES = frozenset({"failed", "abandoned", "reversed"})

SHIPPING_OPTIONS = [
    {"method": "standard", "cost": 0.0, "label": "Standard Shipping"},
    {"method": "express", "cost": 9.99, "label": "Express Shipping"},
    {"method": "overnight", "cost": 24.99, "label": "Overnight Shipping"},
]


def build_reference(order_id: int) -> str:
    return f"IVB-{order_id}-{uuid.uuid4().hex[:10]}"


def order_success_path(order_id: int) -> str:
    return f"/order-success/{order_id}"


def serialize_order_detail(order: OrderModel) -> Dict[str, Any]:
    items = []
    for it in order.items:
        price = to_money(it.price_at_purchase)
        line_total = price * it.quantity
        if it.product is not None:
            product = {"id": it.product.id, "name": it.name or it.product.name, "image_url": it.product.image_url}
        else:
            product = {"id": None, "name": it.name or "Unknown Product", "image_url": None}
        items.append(
            {
                "product": product,
                "quantity": it.quantity,
                "price_at_purchase": float(price),
                "total": float(line_total),
                "formatted_price": format_naira(price),
                "formatted_total": format_naira(line_total),
            }
        )

    return {
        "id": order.id,
        "created_at": order.created_at,
        "formatted_date": format_date(order.created_at),
        "status": order.status,
        "items": items,
        "shipping_info": order.shipping_info,
        "payment_info": {
            "method": order.payment_method,
            "reference": order.payment_reference,
            "channel": order.payment_channel,
            "status": order.payment_status,
            "paid_at": order.paid_at,
        },
        "subtotal": float(to_money(order.subtotal)),
        "tax": float(to_money(order.tax)),
        "shipping_cost": float(to_money(order.shipping_cost)),
        "total": float(to_money(order.total)),
        "formatted_subtotal": format_naira(order.subtotal),
        "formatted_tax": format_naira(order.tax),
        "formatted_shipping": format_naira(order.shipping_cost),
        "formatted_total": format_naira(order.total),
    }


class OrderService:
    """
    Order lifecycle: cart -> pending-payment order -> gateway session ->
    confirmation (redirect, webhook, reconciliation or admin) -> stock + cart cleanup.

    Every confirmation channel goes through confirm_payment, which is guarded by
    a conditional status update, so stock moves exactly once per paid order.
    """

    def __init__(self, db: Session, gateway, lock_service=None, notification_service=None):
        self.db = db
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)
        self.gateway = gateway
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()

    # =====================================================
    # QUERY
    # =====================================================
    def get_checkout_summary(self, user_id: int) -> Dict[str, Any]:
        cart = self.carts.get_cart_by_user(user_id)
        if not cart or not cart.items:
            raise InvalidRequestError("Cart is empty")

        view = serialize_cart(cart)
        return {
            "cart_items": view["cart_items"],
            "subtotal": view["total"],
            "shipping_options": SHIPPING_OPTIONS,
        }

    def get_order_detail(self, order_id: int, principal: Principal) -> Dict[str, Any]:
        """Owner or any admin; a guest order is admin-only."""
        if not (principal.is_user or principal.is_admin):
            raise AuthenticationError("No token provided")

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")

        if principal.is_user:
            if order.user_id is None:
                raise AccessDeniedError("Guest order - sign in not linked")
            if order.user_id != principal.subject:
                raise AccessDeniedError("Unauthorized to view this order")

        return serialize_order_detail(order)

    # =====================================================
    # COMMANDS
    # =====================================================
    def initiate_checkout(self, user_id: int, payload: PaymentInitiateIn) -> Dict[str, Any]:
        """
        Use Case: checkout.

        1. stock check against live products (fails fast, nothing is written)
        2. pending-payment order with frozen prices
        3. gateway session tagged with order/user/cart ids

        A gateway failure after step 2 leaves the order parked at pending-payment,
        flagged init_failed so reconciliation skips it.
        """
        user = self.users.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")

        token = None
        if self.lock_service is not None:
            token = self.lock_service.new_token()
            if not self.lock_service.acquire_checkout_lock(user_id, token, CHECKOUT_LOCK_TTL_SECONDS):
                raise ConflictError("A checkout is already in progress")

        try:
            cart = self.carts.get_cart_by_user(user_id)
            if not cart or not cart.items:
                raise InvalidRequestError("Your cart is empty")

            for item in cart.items:
                if item.product.quantity < item.quantity:
                    raise InvalidRequestError(
                        f"Not enough stock for {item.product.name} (Available: {item.product.quantity})"
                    )

            order = self._create_pending_order(user_id, cart, payload)
            cart_id = cart.id

            logger.info(f"Order {order.id} created from cart {cart_id}, total {order.total}")

            try:
                authorization_url = self.gateway.initiate(
                    amount=order.total,
                    currency=PAYMENT_CURRENCY,
                    email=user.email,
                    callback_url=f"{API_BASE_URL.rstrip('/')}/payments/verify",
                    reference=order.payment_reference,
                    metadata={
                        "orderId": str(order.id),
                        "userId": str(user_id),
                        "cartId": str(cart_id),
                    },
                )
            except PaymentGatewayError as e:
                self.repo.set_payment_status(order.id, PAYMENT_INIT_FAILED)
                self.repo.commit()
                logger.warning(f"Gateway rejected checkout for order {order.id}: {e.message}")
                raise

            return {
                "authorization_url": authorization_url,
                "reference": order.payment_reference,
                "order_id": order.id,
            }
        finally:
            if token is not None:
                self.lock_service.release_checkout_lock(user_id, token)

    def _create_pending_order(self, user_id: int, cart, payload: PaymentInitiateIn) -> OrderModel:
        subtotal = sum(
            (to_money(i.product.price) * i.quantity for i in cart.items),
            Decimal("0.00"),
        )
        tax = to_money(payload.tax)
        shipping_cost = to_money(payload.shipping_cost)
        total = subtotal + tax + shipping_cost

        # tax/shipping are the client's numbers; the total is always ours
        if payload.total is not None and to_money(payload.total) != total:
            logger.warning(
                f"Client total {payload.total} for user {user_id} differs from computed {total}, using computed"
            )

        order = OrderModel(
            user_id=user_id,
            cart_id=cart.id,
            shipping_info=payload.shipping_info.model_dump(),
            payment_method=GATEWAY_METHOD,
            payment_status=PAYMENT_PENDING,
            subtotal=subtotal,
            tax=tax,
            shipping_cost=shipping_cost,
            total=total,
            status=PENDING_PAYMENT,
            items=[
                OrderItemModel(
                    product_id=i.product_id,
                    name=i.product.name,
                    quantity=i.quantity,
                    price_at_purchase=to_money(i.product.price),
                )
                for i in cart.items
            ],
        )

        self.db.add(order)
        self.db.flush()
        order.payment_reference = build_reference(order.id)
        self.repo.commit()
        self.db.refresh(order)
        return order

    def confirm_payment(
        self,
        order_id: int,
        verification: PaymentVerification | None,
        method: str = GATEWAY_METHOD,
    ) -> bool:
        """
        Idempotent "mark paid".
        Returns True only for the call that actually moved the order to processing;
        that call also decrements stock, bumps sales counts and deletes the cart,
        all in one transaction. Any later call is a no-op.
        """
        values = {
            "payment_method": method,
            "payment_status": PAYMENT_PAID,
            "paid_at": (verification.paid_at if verification else None) or datetime.now(timezone.utc),
        }
        if verification is not None:
            values["payment_channel"] = verification.channel

        try:
            rowcount = self.repo.claim_payable(order_id, PROCESSING, **values)
            if rowcount == 0:
                self.repo.rollback()
                logger.info(f"Order {order_id} already confirmed or not payable, skipping")
                return False

            order = self.repo.get_order(order_id)
            user_id, lines = order.user_id, len(order.items)
            for item in order.items:
                if item.product_id is not None:
                    self.products.apply_sale(item.product_id, item.quantity)

            if order.cart_id is not None:
                self.carts.delete_cart(order.cart_id)

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Order {order_id} paid via {method}, stock adjusted for {lines} line(s)")
        self.notification_service.send_order_notification(user_id, order_id)
        return True

    def mark_failed(self, order_id: int, payment_status: str = PAYMENT_FAILED) -> bool:
        # only a still-unpaid order can fail; a late failure never downgrades a paid one
        rowcount = self.repo.transition_status(
            order_id, (PENDING_PAYMENT,), FAILED, payment_status=payment_status
        )
        self.repo.commit()
        if rowcount:
            logger.info(f"Order {order_id} marked failed")
        return bool(rowcount)

    def _resolve_order(self, reference: str | None, order_id: int | None) -> OrderModel | None:
        order = self.repo.get_by_reference(reference) if reference else None
        if order is None and order_id is not None:
            order = self.repo.get_order(order_id)
        return order

    def confirm_from_redirect(self, reference: str | None) -> str:
        """
        Browser redirect from the gateway. Always returns a path to redirect to,
        never raises: errors degrade to the failure page.
        """
        if not reference:
            logger.warning("Payment callback without reference")
            return PAYMENT_FAILED_PATH

        try:
            verification = self.gateway.verify(reference)
            order = self._resolve_order(reference, verification.order_id)
            if order is None:
                logger.warning(f"Payment reference {reference} does not match any order")
                return PAYMENT_FAILED_PATH

            if not verification.successful:
                logger.info(f"Payment {reference} for order {order.id} not successful: {verification.status}")
                self.mark_failed(order.id)
                return PAYMENT_FAILED_PATH

            if self.confirm_payment(order.id, verification) or self._is_paid(order.id):
                return order_success_path(order.id)

            logger.warning(f"Payment {reference} succeeded but order {order.id} is not payable")
            return PAYMENT_FAILED_PATH

        except Exception as e:
            logger.exception(f"Payment verification for {reference} failed: {e}")
            self._fail_quietly(reference)
            return PAYMENT_FAILED_PATH

    def _is_paid(self, order_id: int) -> bool:
        self.db.expire_all()
        order = self.repo.get_order(order_id)
        return order is not None and order.status in PAID_STATUSES

    def _fail_quietly(self, reference: str) -> None:
        try:
            self.repo.rollback()
            order = self.repo.get_by_reference(reference)
            if order:
                self.mark_failed(order.id, payment_status=PAYMENT_VERIFY_ERROR)
        except Exception as e:
            logger.exception(f"Could not mark order for {reference} failed: {e}")

    def handle_webhook_event(self, event: Dict[str, Any]) -> bool:
        """Signature is checked by the caller; this only applies charge.success."""
        event_type = event.get("event")
        if event_type != "charge.success":
            logger.info(f"Webhook event {event_type} ignored")
            return False

        verification = PaymentVerification.from_payload(event.get("data") or {})
        order = self._resolve_order(verification.reference, verification.order_id)
        if order is None:
            logger.warning(f"Webhook charge {verification.reference} does not match any order")
            return False

        return self.confirm_payment(order.id, verification)

    def update_status(self, order_id: int, status: str | None) -> OrderModel:
        if not status or status not in ALLOWED_STATUSES:
            raise InvalidRequestError("Invalid status")

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")

        current = order.status
        if current == status:
            return order

        if not can_transition(current, status):
            raise InvalidRequestError(f"Cannot change order status from {current} to {status}")

        if status == PROCESSING:
            # manual reconciliation; same path as the gateway so stock moves once
            if not self.confirm_payment(order_id, None, method=MANUAL_METHOD):
                raise ConflictError("Order was modified by another operation")
        else:
            rowcount = self.repo.transition_status(order_id, (current,), status)
            if rowcount == 0:
                self.repo.rollback()
                raise ConflictError("Order was modified by another operation")
            self.repo.commit()

        logger.info(f"Order {order_id} status {current} -> {status}")
        self.db.expire_all()
        return self.repo.get_order(order_id)

    def reconcile_pending(self, older_than_seconds: int) -> Dict[str, int]:
        """Re-verify stale pending-payment orders against the gateway."""
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=older_than_seconds)
        stats = {"confirmed": 0, "failed": 0, "pending": 0, "errors": 0}

        orders = self.repo.list_stale_pending(cutoff)
        logger.info(f"Found {len(orders)} stale pending-payment orders")

        for order in orders:
            order_id, reference = order.id, order.payment_reference
            try:
                verification = self.gateway.verify(reference)
                if verification.successful:
                    if self.confirm_payment(order_id, verification):
                        stats["confirmed"] += 1
                elif verification.status in FAILED_GATEWAY_STATUSES:
                    if self.mark_failed(order_id):
                        stats["failed"] += 1
                else:
                    stats["pending"] += 1
            except Exception as e:
                self.repo.rollback()
                stats["errors"] += 1
                logger.warning(f"Failed to reconcile order {order_id}: {e}")

        return stats
