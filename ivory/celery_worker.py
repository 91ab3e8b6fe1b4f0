# ivory/celery_worker.py
from celery import Celery

from ivory.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    RECONCILE_INTERVAL_SECONDS,
)

celery_app = Celery(
    "ivory",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks must be imported explicitly so the worker registers them
celery_app.conf.imports = (
    "ivory.tasks.reconcile",
    "ivory.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "reconcile-pending-payments": {
        "task": "ivory.tasks.reconcile.reconcile_pending_payments_task",
        "schedule": RECONCILE_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
