from datetime import timedelta

from storefront.data.models import CartModel, OrderModel, ProductModel, UserModel
from storefront.data.models._common import utcnow
from storefront.tasks.purge import purge_stale_carts
from conftest import SHIPPING, auth_header, count_rows, create_user


def test_seed_populates_empty_catalog(client):
    resp = client.post("/seed")
    assert resp.status_code == 200
    assert resp.json()["created"] == 8
    assert count_rows(ProductModel) == 8


def test_seed_is_noop_when_products_exist(client):
    client.post("/seed")
    resp = client.post("/seed")
    assert resp.json() == {"success": True, "message": "Products already exist", "created": 0}
    assert count_rows(ProductModel) == 8


def test_forced_seed_resets_data(client, admin_headers):
    client.post("/seed")
    pid = client.get("/products").json()["products"][0]["id"]
    client.post("/cart/items", json={"product_id": pid})
    client.post("/orders", json=SHIPPING)

    resp = client.post("/seed", params={"force": "true"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["created"] == 8
    assert count_rows(ProductModel) == 8
    assert count_rows(OrderModel) == 0
    assert count_rows(UserModel) == 0


def test_forced_seed_refused_in_production(client, monkeypatch):
    monkeypatch.setattr("storefront.api.routers.seed.is_production", lambda: True)
    resp = client.post("/seed", params={"force": "true"})
    assert resp.status_code == 403


def test_forced_seed_on_empty_database_needs_no_login(client):
    resp = client.post("/seed", params={"force": "true"})
    assert resp.status_code == 200
    assert resp.json()["created"] == 8


def test_forced_seed_requires_admin_once_users_exist(client):
    client.post("/seed")
    customer = create_user(email="c@example.com", role="customer")

    assert client.post("/seed", params={"force": "true"}).status_code == 401
    resp = client.post("/seed", params={"force": "true"}, headers=auth_header(customer, "customer"))
    assert resp.status_code == 403
    assert count_rows(UserModel) == 1
    assert count_rows(ProductModel) == 8


def test_purge_stale_carts(db):
    owner = create_user(email="u@example.com", role="customer")
    old = utcnow() - timedelta(days=40)
    db.add_all(
        [
            CartModel(session_id="stale", updated_at=old),
            CartModel(session_id="fresh"),
            CartModel(session_id="owned", user_id=owner, updated_at=old),
        ]
    )
    db.commit()

    assert purge_stale_carts(db) == 1
    remaining = {c.session_id for c in db.query(CartModel).all()}
    assert remaining == {"fresh", "owned"}
