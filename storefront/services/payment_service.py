# storefront/services/payment_service.py
import uuid
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.domain.errors import PaymentInProgress, ValidationError
from storefront.domain.identity import SessionIdentity, UserIdentity
from storefront.repos.order_repo import OrderRepo
from storefront.services.lock_service import LockService
from storefront.services.order_service import OrderService
from storefront.services.payment_gateway import PaymentGateway
from storefront.utils.settings import PAYMENT_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"


def _stripe_shipping(shipping: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": f"{shipping['first_name']} {shipping['last_name']}",
        "address": {
            "line1": shipping["address"],
            "city": shipping["city"],
            "state": shipping.get("state") or "",
            "postal_code": shipping["zip_code"],
            "country": shipping["country"],
        },
    }


def _order_shipping(intent: Dict[str, Any]) -> Dict[str, Any]:
    shipping = intent.get("shipping") or {}
    address = shipping.get("address") or {}
    first_name, _, last_name = (shipping.get("name") or "").partition(" ")
    return {
        "first_name": first_name or None,
        "last_name": last_name or None,
        "email": intent.get("receipt_email"),
        "address": address.get("line1"),
        "city": address.get("city"),
        "state": address.get("state"),
        "zip_code": address.get("postal_code"),
        "country": address.get("country"),
    }


class PaymentService:
    """
    Płatności Stripe.
    -intent: liczy total koszyka i zapisuje sesję/usera w metadanych
    -webhook: po payment_intent.succeeded tworzy zamówienie (processing)
     idempotentnie po id payment intentu
    """

    def __init__(self, db: Session, gateway: PaymentGateway, lock_service: LockService | None = None):
        self.db = db
        self.orders = OrderRepo(db)
        self.order_service = OrderService(db)
        self.gateway = gateway
        self.lock_service = lock_service

    def create_payment_intent(
        self,
        session: SessionIdentity,
        user: UserIdentity | None = None,
        shipping: Dict[str, Any] | None = None,
    ) -> Dict[str, str]:
        totals = self.order_service.quote(session.session_id)

        #webhook nie ma cookie, więc tożsamość jedzie w metadanych
        metadata = {"sessionId": session.session_id}
        if user:
            metadata["userId"] = user.user_id

        intent = self.gateway.create_intent(
            amount=totals.amount_in_cents,
            metadata=metadata,
            shipping=_stripe_shipping(shipping) if shipping else None,
            receipt_email=shipping.get("email") if shipping else None,
        )
        logger.info(
            f"PaymentIntent {intent['id']} created for session {session.session_id}, "
            f"amount {totals.amount_in_cents}"
        )
        return {"client_secret": intent["client_secret"]}

    def handle_webhook(self, payload: bytes, sig_header: str | None) -> Dict[str, Any]:
        event = self.gateway.verify_event(payload, sig_header)
        event_type = event.get("type")

        if event_type != PAYMENT_SUCCEEDED:
            logger.info(f"Webhook event {event_type} acknowledged, nothing to do")
            return {"received": True}

        intent = (event.get("data") or {}).get("object") or {}
        payment_id = intent.get("id")
        metadata = intent.get("metadata") or {}
        session_id = metadata.get("sessionId")

        if not payment_id or not session_id:
            raise ValidationError(
                "Payment intent bez wymaganych metadanych",
                fields={"metadata.sessionId": "wymagane", "id": "wymagane"},
            )

        owner = uuid.uuid4().hex
        if not self.lock_service.acquire_payment_lock(payment_id, owner, PAYMENT_LOCK_TTL_SECONDS):
            raise PaymentInProgress(f"Płatność {payment_id} jest już przetwarzana")

        try:
            return self._confirm_payment(payment_id, session_id, metadata.get("userId"), intent)
        finally:
            self.lock_service.release_payment_lock(payment_id, owner)

    def _confirm_payment(
        self,
        payment_id: str,
        session_id: str,
        user_id: str | None,
        intent: Dict[str, Any],
    ) -> Dict[str, Any]:
        existing = self.orders.get_order_by_payment(payment_id)
        if existing:
            logger.info(f"Duplicate webhook for {payment_id}, order {existing.id} already exists")
            return {"received": True, "order_id": existing.id, "duplicate": True}

        try:
            order = self.order_service.place_order(
                session_id=session_id,
                user_id=user_id,
                status="processing",
                shipping=_order_shipping(intent),
                payment_id=payment_id,
                payment_method="stripe",
            )
        except IntegrityError:
            #równoległe wstawienie z tym samym payment_id (lock wygasł)
            existing = self.orders.get_order_by_payment(payment_id)
            if existing is None:
                raise
            logger.info(f"Order for {payment_id} inserted concurrently, treating as duplicate")
            return {"received": True, "order_id": existing.id, "duplicate": True}

        paid = intent.get("amount_received") or intent.get("amount")
        expected = int((order.total * 100).to_integral_value())
        if paid is not None and paid != expected:
            logger.warning(f"Payment {payment_id} amount {paid} differs from order {order.id} total {expected}")

        return {"received": True, "order_id": order.id, "duplicate": False}
