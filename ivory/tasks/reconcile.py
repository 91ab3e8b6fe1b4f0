# ivory/tasks/reconcile.py
from ivory.celery_worker import celery_app
from ivory.data.database import SessionLocal
from ivory.services.order_service import OrderService
from ivory.services.payment_gateway import PaystackClient
from ivory.utils.settings import PENDING_PAYMENT_GRACE_SECONDS
from ivory.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="ivory.tasks.reconcile.reconcile_pending_payments_task")
def reconcile_pending_payments_task(older_than_seconds: int = PENDING_PAYMENT_GRACE_SECONDS):
    logger.info("Reconcile pending payments task started")

    db = SessionLocal()
    try:
        stats = OrderService(db, gateway=PaystackClient()).reconcile_pending(older_than_seconds)
        logger.info(
            f"Reconciled: {stats['confirmed']} confirmed, {stats['failed']} failed, "
            f"{stats['pending']} still pending, {stats['errors']} errors"
        )
        return stats
    finally:
        db.close()
