"""Checkout orchestration against a stubbed API client."""

from decimal import Decimal

import pytest

from payments.gateway import FakeGateway
from storefront.cart import CartStore
from storefront.checkout import CheckoutOrchestrator
from storefront.errors import NetworkError, PersistenceError


class StubClient:
    def __init__(self, error=None, client_secret="pi_1_secret_abc"):
        self.error = error
        self.client_secret = client_secret
        self.requests = []

    def create_order(self, items, shipping_address, payment_method):
        self.requests.append(items)
        if self.error:
            raise self.error
        return {
            "order": {"id": "o-1", "total_amount": 5.5, "payment_reference": "pi_1"},
            "client_secret": self.client_secret,
        }


@pytest.fixture()
def cart():
    cart = CartStore()
    cart.add_item({"id": "tea", "price": "5.50"})
    return cart


def test_network_error_keeps_cart(cart):
    client = StubClient(error=NetworkError("POST /orders timed out"))
    with pytest.raises(NetworkError):
        CheckoutOrchestrator(cart, client, FakeGateway()).checkout({}, "card", "tok")
    assert len(cart) == 1


def test_persistence_error_keeps_cart(cart):
    client = StubClient(error=PersistenceError("Order could not be saved"))
    with pytest.raises(PersistenceError):
        CheckoutOrchestrator(cart, client, FakeGateway()).checkout({}, "card", "tok")
    assert len(cart) == 1


def test_success_clears_cart(cart):
    gateway = FakeGateway()
    intent = gateway.create_intent(550, "usd", "o-1")
    client = StubClient(client_secret=intent.client_secret)

    result = CheckoutOrchestrator(cart, client, gateway).checkout({}, "card", "tok")

    assert result.total_amount == Decimal("5.5")
    assert result.payment_reference == intent.id
    assert [item.product_id for item in client.requests[0]] == ["tea"]
    assert not cart
