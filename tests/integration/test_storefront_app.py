"""End-to-end: the full application driven through the storefront client."""

import json
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.cart import CartStore
from storefront.checkout import checkout
from storefront.client import StorefrontClient
from storefront.errors import AuthenticationError, GatewayError, NotFoundError
from storefront.storage import JsonFileCartStorage

ADDRESS = {"street": "1 Main St", "city": "Springfield", "state": "IL", "postal_code": "62701", "country": "US"}


@pytest.fixture(scope="module")
def api():
    from app import app

    return TestClient(app)


@pytest.fixture()
def shopper(api):
    client = StorefrontClient(http=api)
    client.register("Ada Shopper", "ada@example.com", "s3cret-pass")
    client.login("ada@example.com", "s3cret-pass")
    return client


@pytest.fixture()
def mug_id(api, shopper):
    response = api.post(
        "/products",
        json={"name": "Enamel Mug", "description": "Camp mug", "price": 10.0, "category": "kitchen", "stock": 5},
        headers={"Authorization": f"Bearer {shopper.token}"},
    )
    assert response.status_code == 201
    return response.json()["product_id"]


def test_health(api):
    response = api.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_wrong_password_is_rejected(api, shopper):
    with pytest.raises(AuthenticationError):
        StorefrontClient(http=api).login("ada@example.com", "wrong-pass")


def test_browse_add_to_cart_and_check_out(api, shopper, mug_id, tmp_path, fake_gateway):
    listing = shopper.list_products(category="kitchen", search="MUG")
    assert [p["id"] for p in listing["products"]] == [mug_id]
    assert listing["total_pages"] == 1

    storage = JsonFileCartStorage(tmp_path / "cart.json")
    CartStore(storage).add_item(shopper.get_product(mug_id), 2)

    # a restarted client picks the cart back up
    cart = CartStore(storage)
    result = checkout(cart, shopper, ADDRESS, "card", "pm_card_visa")

    assert result.total_amount == Decimal("20")
    assert fake_gateway.calls_to("create_intent")[0]["amount_minor_units"] == 2000
    assert not CartStore(storage)

    api.post(
        "/payments/webhook",
        content=json.dumps({"type": "payment_intent.succeeded", "data": {"object": {"id": result.payment_reference}}}),
        headers={"X-Gateway-Signature": "test-signature"},
    )
    order = shopper.get_order(result.order_id)
    assert order["payment_status"] == "completed"
    assert order["total_amount"] == 20.0


def test_declined_checkout_keeps_cart(api, shopper, mug_id, fake_gateway):
    fake_gateway.configure("decline")
    cart = CartStore()
    cart.add_item(shopper.get_product(mug_id))

    with pytest.raises(GatewayError):
        checkout(cart, shopper, ADDRESS, "card", "pm_card_chargeDeclined")

    assert len(cart) == 1
    assert shopper.list_orders()[0]["payment_status"] == "pending"


def test_unknown_product_is_not_found(shopper):
    with pytest.raises(NotFoundError):
        shopper.get_product("does-not-exist")
