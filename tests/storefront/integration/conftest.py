import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ordering.api import order_router
from payments.api import payment_router
from shared.errors import register_exception_handlers
from storefront.cart import CartStore
from storefront.client import StorefrontClient
from storefront.storage import MemoryCartStorage


@pytest.fixture(autouse=True)
def _ctx():
    from ordering.domain import ordering

    with ordering.domain_context():
        yield


@pytest.fixture()
def api():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(order_router)
    app.include_router(payment_router)
    return TestClient(app)


@pytest.fixture()
def shopper(api, make_user):
    """A logged-in storefront client talking to the in-process API."""
    _, token = make_user()
    return StorefrontClient(token=token, http=api)


@pytest.fixture()
def cart():
    cart = CartStore(MemoryCartStorage())
    cart.add_item({"id": "mug", "name": "Mug", "price": 10.0}, 2)
    cart.add_item({"id": "pen", "name": "Pen", "price": "0.10"}, 3)
    return cart
