from decimal import Decimal

from storefront.data.models import OrderModel
from storefront.repos.order_repo import OrderRepo
from conftest import (
    SHIPPING,
    auth_header,
    count_rows,
    create_product,
    create_user,
    load_product,
    post_webhook,
    sign,
    webhook_payload,
)


def fill_cart(client, price="30.00", quantity=2, stock=10) -> str:
    pid = create_product(price=price, stock=stock)
    client.post("/cart/items", json={"product_id": pid, "quantity": quantity})
    return pid


def test_intent_amount_in_cents_and_metadata(client, gateway):
    fill_cart(client, price="30.00", quantity=2)

    resp = client.post("/payments/intent")
    assert resp.status_code == 200
    assert resp.json() == {"clientSecret": "pi_test_1_secret_abc"}

    intent = gateway.intents[0]
    assert intent["amount"] == 6000
    assert intent["metadata"] == {"sessionId": client.cookies["cart_session"]}


def test_intent_with_flat_shipping(client, gateway):
    fill_cart(client, price="10.00", quantity=1)
    client.post("/payments/intent")
    assert gateway.intents[0]["amount"] == 1599


def test_intent_carries_user_and_shipping(client, gateway):
    uid = create_user(email="payer@example.com", role="customer")
    fill_cart(client)

    resp = client.post("/payments/intent", json={"shipping": SHIPPING}, headers=auth_header(uid, "customer"))
    assert resp.status_code == 200

    intent = gateway.intents[0]
    assert intent["metadata"]["userId"] == uid
    assert intent["shipping"]["address"]["postal_code"] == "00-001"
    assert intent["receipt_email"] == "jan@example.com"


def test_intent_empty_cart(client, gateway):
    resp = client.post("/payments/intent")
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "empty_cart"
    assert gateway.intents == []


def test_intent_does_not_mutate_state(client):
    pid = fill_cart(client, quantity=2, stock=10)
    client.post("/payments/intent")
    assert load_product(pid).stock == 10
    assert len(client.get("/cart").json()["items"]) == 1
    assert count_rows(OrderModel) == 0


def test_webhook_succeeded_creates_processing_order(client):
    pid = fill_cart(client, price="30.00", quantity=2, stock=10)
    session_id = client.cookies["cart_session"]

    resp = post_webhook(client, webhook_payload("pi_123", session_id, amount=6000))
    assert resp.status_code == 200
    body = resp.json()
    assert body["received"] is True
    assert body["duplicate"] is False

    order = client.get(f"/orders/{body['order_id']}").json()
    assert order["status"] == "processing"
    assert order["payment_id"] == "pi_123"
    assert order["payment_method"] == "stripe"
    assert Decimal(order["total"]) == Decimal("60.00")
    assert order["first_name"] == "Jan"
    assert order["zip_code"] == "00-001"

    assert load_product(pid).stock == 8
    assert client.get("/cart").json()["items"] == []


def test_webhook_recovers_user_from_metadata(client):
    uid = create_user(email="owner@example.com", role="customer")
    fill_cart(client)
    session_id = client.cookies["cart_session"]

    body = post_webhook(client, webhook_payload("pi_user", session_id, user_id=uid)).json()
    listing = client.get("/orders", headers=auth_header(uid, "customer")).json()
    assert [o["id"] for o in listing["orders"]] == [body["order_id"]]


def test_duplicate_webhook_is_idempotent(client):
    pid = fill_cart(client, quantity=2, stock=10)
    session_id = client.cookies["cart_session"]
    payload = webhook_payload("pi_dup", session_id)

    first = post_webhook(client, payload).json()

    # klient dorzuca coś do koszyka zanim stripe ponowi event
    client.post("/cart/items", json={"product_id": pid, "quantity": 1})
    second = post_webhook(client, payload)

    assert second.status_code == 200
    assert second.json()["duplicate"] is True
    assert second.json()["order_id"] == first["order_id"]
    assert count_rows(OrderModel) == 1
    assert load_product(pid).stock == 8
    assert client.get("/cart").json()["items"][0]["quantity"] == 1


def test_webhook_invalid_signature(client):
    pid = fill_cart(client)
    payload = webhook_payload("pi_bad", client.cookies["cart_session"])

    resp = post_webhook(client, payload, signature=sign(payload, secret="whsec_wrong"))
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "invalid_signature"
    assert count_rows(OrderModel) == 0
    assert load_product(pid).stock == 10


def test_webhook_signature_covers_raw_bytes(client):
    fill_cart(client)
    payload = webhook_payload("pi_tamper", client.cookies["cart_session"])
    signature = sign(payload)
    # ten sam JSON, inne bajty
    tampered = payload.replace(b'"type": ', b'"type":')

    resp = post_webhook(client, tampered, signature=signature)
    assert resp.status_code == 400
    assert count_rows(OrderModel) == 0


def test_webhook_missing_signature(client):
    payload = webhook_payload("pi_nosig", "abc")
    resp = client.post("/payments/webhook", content=payload)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "invalid_signature"


def test_webhook_other_events_are_acknowledged(client):
    pid = fill_cart(client)
    payload = webhook_payload("pi_fail", client.cookies["cart_session"], event_type="payment_intent.payment_failed")

    resp = post_webhook(client, payload)
    assert resp.status_code == 200
    assert resp.json()["received"] is True
    assert resp.json()["order_id"] is None
    assert count_rows(OrderModel) == 0
    assert load_product(pid).stock == 10


def test_webhook_with_empty_cart(client):
    client.get("/cart")
    resp = post_webhook(client, webhook_payload("pi_empty", client.cookies["cart_session"]))
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "empty_cart"
    assert count_rows(OrderModel) == 0


def test_webhook_without_session_metadata(client):
    payload = webhook_payload("pi_meta", "")
    resp = post_webhook(client, payload)
    assert resp.status_code == 422


def test_webhook_in_progress_elsewhere(client, lock_service):
    pid = fill_cart(client)
    lock_service.locks["pi_busy"] = "other-worker"

    resp = post_webhook(client, webhook_payload("pi_busy", client.cookies["cart_session"]))
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "payment_in_progress"
    assert count_rows(OrderModel) == 0
    assert load_product(pid).stock == 10


def test_webhook_releases_lock(client, lock_service):
    fill_cart(client)
    post_webhook(client, webhook_payload("pi_rel", client.cookies["cart_session"]))
    assert lock_service.locks == {}


def test_concurrent_insert_with_same_payment_is_duplicate(client, monkeypatch):
    pid = fill_cart(client, quantity=1, stock=10)
    session_id = client.cookies["cart_session"]
    payload = webhook_payload("pi_race", session_id)
    first = post_webhook(client, payload).json()

    # druga dostawa po wygaśnięciu locka: koszyk jeszcze pełny, pre-check nie widzi zamówienia
    client.post("/cart/items", json={"product_id": pid, "quantity": 1})
    original = OrderRepo.get_order_by_payment
    calls = []

    def stale_lookup(self, payment_id):
        calls.append(payment_id)
        if len(calls) == 1:
            return None
        return original(self, payment_id)

    monkeypatch.setattr(OrderRepo, "get_order_by_payment", stale_lookup)
    second = post_webhook(client, payload)

    assert second.status_code == 200
    assert second.json() == {"received": True, "order_id": first["order_id"], "duplicate": True}
    assert len(calls) == 2
    assert count_rows(OrderModel) == 1
    assert load_product(pid).stock == 9
    # rollback zostawia koszyk nietknięty
    assert client.get("/cart").json()["items"][0]["quantity"] == 1


def test_amount_mismatch_is_logged(client, storefront_logs):
    fill_cart(client, price="30.00", quantity=2)
    payload = webhook_payload("pi_short", client.cookies["cart_session"], amount=1234)

    resp = post_webhook(client, payload)
    assert resp.status_code == 200
    assert resp.json()["duplicate"] is False

    warnings = [r for r in storefront_logs.records if r.levelname == "WARNING"]
    assert len(warnings) == 1
    assert "pi_short amount 1234 differs" in warnings[0].getMessage()
    assert "total 6000" in warnings[0].getMessage()


def test_matching_amount_logs_no_warning(client, storefront_logs):
    fill_cart(client, price="30.00", quantity=2)
    post_webhook(client, webhook_payload("pi_exact", client.cookies["cart_session"], amount=6000))
    assert not [r for r in storefront_logs.records if r.levelname == "WARNING"]
