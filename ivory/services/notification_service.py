# ivory/services/notification_service.py
from ivory.celery_worker import celery_app
from ivory.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Customer notifications about their orders.
    Dispatched through Celery so the request never waits on delivery.
    """

    @staticmethod
    def send_order_notification(user_id: int | None, order_id: int):
        send_order_notification_task.delay(user_id, order_id)


@celery_app.task(name="ivory.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int | None, order_id: int):
    """
    Celery task - the payment for the order is confirmed and it moves to processing.
    Delivery channel (email/SMS) is not wired yet; the event is logged.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: Order {order_id} is paid and being processed")

    return {"user_id": user_id, "order_id": order_id, "status": "sent"}
