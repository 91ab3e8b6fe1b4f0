# ivory/domain/order_status.py
PENDING_PAYMENT = "pending-payment"
PROCESSING = "processing"
SHIPPED = "shipped"
DELIVERED = "delivered"
CANCELLED = "cancelled"
FAILED = "failed"

ALLOWED_STATUSES = frozenset(
    {PROCESSING, SHIPPED, DELIVERED, PENDING_PAYMENT, CANCELLED, FAILED}
)

PAID_STATUSES = frozenset({PROCESSING, SHIPPED, DELIVERED})

# payment_status markers
PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"
PAYMENT_FAILED = "failed"
# verify call errored; a later confirmed charge may still pay the order
PAYMENT_VERIFY_ERROR = "verify_error"
# gateway never accepted the session, nothing to reconcile
PAYMENT_INIT_FAILED = "init_failed"

# admin-driven moves; delivered, cancelled and failed are terminal
ADMIN_TRANSITIONS = {
    PENDING_PAYMENT: frozenset({PROCESSING, FAILED, CANCELLED}),
    PROCESSING: frozenset({SHIPPED, DELIVERED, CANCELLED}),
    SHIPPED: frozenset({DELIVERED, CANCELLED}),
    DELIVERED: frozenset(),
    CANCELLED: frozenset(),
    FAILED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    if current == target:
        return True
    return target in ADMIN_TRANSITIONS.get(current, frozenset())
