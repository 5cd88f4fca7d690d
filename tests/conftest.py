import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "1"

import hashlib
import hmac
import json
import logging
import time
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select, func

from storefront.main import app
from storefront.api.deps import get_payment_gateway, get_lock_service
from storefront.data.database import Base, engine, SessionLocal
from storefront.data.models import ProductModel, UserModel
from storefront.services.payment_gateway import PaymentGateway
from storefront.utils.security import hash_password, create_access_token

WEBHOOK_SECRET = "whsec_test_secret"


class FakeGateway(PaymentGateway):
    """Stripe bez sieci: intent zapisywany lokalnie, weryfikacja podpisu prawdziwa."""

    def __init__(self):
        super().__init__(api_key="sk_test_dummy", webhook_secret=WEBHOOK_SECRET)
        self.intents = []

    def create_intent(self, amount, metadata, shipping=None, receipt_email=None):
        intent_id = f"pi_test_{len(self.intents) + 1}"
        self.intents.append(
            {
                "id": intent_id,
                "amount": amount,
                "metadata": metadata,
                "shipping": shipping,
                "receipt_email": receipt_email,
            }
        )
        return {"id": intent_id, "client_secret": f"{intent_id}_secret_abc"}


class FakeLockService:
    def __init__(self):
        self.locks = {}

    def acquire_payment_lock(self, payment_id, owner, ttl):
        if payment_id in self.locks:
            return False
        self.locks[payment_id] = owner
        return True

    def release_payment_lock(self, payment_id, owner):
        if self.locks.get(payment_id) == owner:
            del self.locks[payment_id]
            return True
        return False


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def client(gateway, lock_service):
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def storefront_logs(caplog):
    """Logger storefront ma propagate=False, podpinamy handler caplog bezpośrednio."""
    logger = logging.getLogger("storefront")
    logger.addHandler(caplog.handler)
    caplog.set_level(logging.INFO, logger="storefront")
    yield caplog
    logger.removeHandler(caplog.handler)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


def create_product(name="Test product", price="10.00", stock=10, category="General", featured=False) -> str:
    with SessionLocal() as s:
        product = ProductModel(
            name=name,
            description=f"{name} description",
            price=Decimal(price),
            category=category,
            stock=stock,
            featured=featured,
        )
        s.add(product)
        s.commit()
        return product.id


def load_product(product_id: str) -> ProductModel | None:
    with SessionLocal() as s:
        return s.get(ProductModel, product_id)


def count_rows(model) -> int:
    with SessionLocal() as s:
        return s.execute(select(func.count()).select_from(model)).scalar_one()


def create_user(email="admin@example.com", role="admin", password="secret123") -> str:
    with SessionLocal() as s:
        user = UserModel(name=email.split("@")[0], email=email, password_hash=hash_password(password), role=role)
        s.add(user)
        s.commit()
        return user.id


def auth_header(user_id: str, role: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


@pytest.fixture
def admin_headers():
    return auth_header(create_user(), "admin")


SHIPPING = {
    "first_name": "Jan",
    "last_name": "Kowalski",
    "email": "jan@example.com",
    "address": "Prosta 1",
    "city": "Warszawa",
    "state": "",
    "zip_code": "00-001",
    "country": "PL",
}


def sign(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    ts = timestamp or int(time.time())
    signed = f"{ts}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={signature}"


def webhook_payload(
    payment_id: str,
    session_id: str,
    user_id: str | None = None,
    event_type: str = "payment_intent.succeeded",
    amount: int | None = None,
) -> bytes:
    metadata = {"sessionId": session_id}
    if user_id:
        metadata["userId"] = user_id
    event = {
        "id": f"evt_{payment_id}",
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": payment_id,
                "object": "payment_intent",
                "amount": amount,
                "amount_received": amount,
                "metadata": metadata,
                "shipping": {
                    "name": "Jan Kowalski",
                    "address": {
                        "line1": "Prosta 1",
                        "city": "Warszawa",
                        "state": "",
                        "postal_code": "00-001",
                        "country": "PL",
                    },
                },
                "receipt_email": "jan@example.com",
            }
        },
    }
    return json.dumps(event).encode("utf-8")


def post_webhook(client, payload: bytes, signature: str | None = None):
    headers = {"Content-Type": "application/json"}
    headers["stripe-signature"] = signature if signature is not None else sign(payload)
    return client.post("/payments/webhook", content=payload, headers=headers)
