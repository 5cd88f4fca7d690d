# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień.
    Używa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_notification(order_id: str, email: str | None):
        """
        Wysyła potwierdzenie przyjęcia zamówienia.
        """
        send_order_notification_task.delay(order_id, email)


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(order_id: str, email: str | None):
    """
    Celery task - w prawdziwym systemie wysłałby email.
    Teraz tylko loguje.
    """
    recipient = email or "<brak adresu>"
    logger.info(f"[NOTIFICATION] {recipient}: Order {order_id} received")

    return {"order_id": order_id, "email": email, "status": "sent"}
