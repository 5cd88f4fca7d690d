# storefront/services/payment_gateway.py
import json
from typing import Dict, Any

import stripe

from storefront.domain.errors import InvalidSignature, ValidationError
from storefront.utils.retry import stripe_retry
from storefront.utils.settings import STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET, STRIPE_CURRENCY
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentGateway:
    """Cienka warstwa nad Stripe: tworzenie payment intentów i weryfikacja webhooków."""

    def __init__(
        self,
        api_key: str | None = None,
        webhook_secret: str | None = None,
        currency: str | None = None,
    ):
        self.api_key = api_key or STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret or STRIPE_WEBHOOK_SECRET
        self.currency = currency or STRIPE_CURRENCY

    @stripe_retry()
    def create_intent(
        self,
        amount: int,
        metadata: Dict[str, str],
        shipping: Dict[str, Any] | None = None,
        receipt_email: str | None = None,
    ) -> Dict[str, str]:
        params: Dict[str, Any] = {
            "amount": amount,
            "currency": self.currency,
            "metadata": metadata,
        }
        if shipping:
            params["shipping"] = shipping
        if receipt_email:
            params["receipt_email"] = receipt_email

        logger.info(f"Stripe PaymentIntent.create amount={amount} {self.currency}")
        intent = stripe.PaymentIntent.create(api_key=self.api_key, **params)
        return {"id": intent.id, "client_secret": intent.client_secret}

    def verify_event(self, payload: bytes, sig_header: str | None) -> Dict[str, Any]:
        """
        Weryfikacja podpisu na SUROWYCH bajtach, JSON parsowany dopiero po niej.
        """
        if not sig_header:
            raise InvalidSignature("Brak nagłówka Stripe-Signature")

        try:
            stripe.WebhookSignature.verify_header(
                payload.decode("utf-8"),
                sig_header,
                self.webhook_secret,
                stripe.Webhook.DEFAULT_TOLERANCE,
            )
        except (stripe.SignatureVerificationError, UnicodeDecodeError) as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise InvalidSignature("Niepoprawny podpis webhooka") from e

        try:
            return json.loads(payload)
        except ValueError as e:
            raise ValidationError("Niepoprawny JSON webhooka") from e
