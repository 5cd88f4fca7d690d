# storefront/celery_worker.py
from celery import Celery
from storefront.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
)

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = (
    "storefront.tasks.purge",
    "storefront.services.notification_service",
)

# Konfiguracja beat schedule
celery_app.conf.beat_schedule = {
    "purge-stale-carts-hourly": {
        "task": "storefront.tasks.purge.purge_stale_carts_task",
        "schedule": 3600.0,  # co godzinę
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
