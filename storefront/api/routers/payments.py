# storefront/api/routers/payments.py
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from storefront.api.deps import (
    get_session_identity,
    get_optional_user,
    get_payment_gateway,
    get_lock_service,
)
from storefront.data.database import get_db
from storefront.domain.identity import SessionIdentity, UserIdentity
from storefront.domain.schemas import PaymentIntentIn, PaymentIntentOut, WebhookAck
from storefront.services.lock_service import LockService
from storefront.services.payment_gateway import PaymentGateway
from storefront.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/intent", response_model=PaymentIntentOut)
def create_payment_intent(
    payload: PaymentIntentIn | None = None,
    session: SessionIdentity = Depends(get_session_identity),
    user: UserIdentity | None = Depends(get_optional_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    db: Session = Depends(get_db),
):
    shipping = payload.shipping.model_dump() if payload and payload.shipping else None
    svc = PaymentService(db, gateway)
    return svc.create_payment_intent(session, user, shipping)


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    gateway: PaymentGateway = Depends(get_payment_gateway),
    lock_service: LockService = Depends(get_lock_service),
    db: Session = Depends(get_db),
):
    """
    Webhook Stripe. Podpis sprawdzany na surowym body, bez parsowania przez FastAPI.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    svc = PaymentService(db, gateway, lock_service)
    return await run_in_threadpool(svc.handle_webhook, payload, sig_header)
