"""Tests for the Order aggregate: totals and the payment/fulfilment state machine."""

import pytest
from ordering.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderShipped,
    PaymentConfirmed,
    PaymentFailed,
)
from ordering.order.order import Order, OrderStatus, PaymentStatus
from protean.exceptions import ValidationError

ADDRESS = {"street": "1 Main St", "city": "Springfield", "state": "IL", "postal_code": "62701", "country": "US"}


def _place(items=None, **overrides):
    defaults = {
        "user_id": "user-1",
        "items_data": items
        or [
            {"product_id": "A", "quantity": 2, "price_at_purchase": 10.0},
            {"product_id": "B", "quantity": 3, "price_at_purchase": 0.1},
        ],
        "shipping_address": ADDRESS,
        "payment_method": "card",
    }
    defaults.update(overrides)
    return Order.place(**defaults)


def _pending(**overrides):
    """An order as the ledger saves it: placed with its payment intent attached."""
    order = _place(**overrides)
    order.attach_payment_intent("pi_1")
    return order


def _paid():
    order = _pending()
    order.record_payment_success()
    return order


def _events(order, cls):
    return [e for e in order._events if isinstance(e, cls)]


class TestPlace:
    def test_total_is_exact_sum(self):
        assert _place().total_amount == 20.3

    def test_initial_state(self):
        order = _place()
        assert order.order_status == OrderStatus.PROCESSING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.currency == "usd"

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError):
            Order.place(user_id="u", items_data=[], shipping_address=ADDRESS, payment_method="card")

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            _place(items=[{"product_id": "A", "quantity": 0, "price_at_purchase": 1.0}])

    def test_total_must_match_items(self):
        order = _place()
        with pytest.raises(ValidationError):
            order.total_amount = 999.0

    def test_attach_payment_intent_raises_order_placed(self):
        order = _place()
        order.attach_payment_intent("pi_1")
        event = _events(order, OrderPlaced)[0]
        assert event.payment_reference == "pi_1"
        assert event.total_amount == 20.3
        assert event.item_count == 5

    def test_only_one_intent(self):
        order = _place()
        order.attach_payment_intent("pi_1")
        with pytest.raises(ValidationError):
            order.attach_payment_intent("pi_2")


class TestPayment:
    def test_success(self):
        order = _paid()
        assert order.payment_status == PaymentStatus.COMPLETED.value
        assert len(_events(order, PaymentConfirmed)) == 1

    def test_repeated_success_is_noop(self):
        order = _paid()
        order.record_payment_success()
        assert len(_events(order, PaymentConfirmed)) == 1

    def test_failure(self):
        order = _pending()
        order.record_payment_failure("card_declined")
        assert order.payment_status == PaymentStatus.FAILED.value
        assert order.failure_reason == "card_declined"
        assert _events(order, PaymentFailed)[0].reason == "card_declined"

    def test_repeated_failure_is_noop(self):
        order = _pending()
        order.record_payment_failure("card_declined")
        order.record_payment_failure("card_declined")
        assert len(_events(order, PaymentFailed)) == 1

    def test_failed_cannot_become_completed(self):
        order = _pending()
        order.record_payment_failure("card_declined")
        with pytest.raises(ValidationError):
            order.record_payment_success()

    def test_completed_cannot_fail(self):
        order = _paid()
        with pytest.raises(ValidationError):
            order.record_payment_failure("late decline")


    @pytest.mark.parametrize("record", ["success", "failure"])
    def test_outcome_needs_an_attached_intent(self, record):
        order = _place()
        with pytest.raises(ValidationError) as exc:
            if record == "success":
                order.record_payment_success()
            else:
                order.record_payment_failure("card_declined")
        assert "payment_reference" in exc.value.messages
        assert order.payment_status == PaymentStatus.PENDING.value

class TestFulfilment:
    def test_ship_then_deliver(self):
        order = _paid()
        order.ship("TRACK-1")
        assert order.order_status == OrderStatus.SHIPPED.value
        assert order.tracking_number == "TRACK-1"
        order.deliver()
        assert order.order_status == OrderStatus.DELIVERED.value
        assert _events(order, OrderShipped) and _events(order, OrderDelivered)

    def test_cannot_ship_unpaid(self):
        with pytest.raises(ValidationError):
            _pending().ship("TRACK-1")

    def test_ship_requires_tracking_number(self):
        with pytest.raises(ValidationError):
            _paid().ship("")

    def test_cannot_deliver_before_shipping(self):
        with pytest.raises(ValidationError):
            _paid().deliver()


class TestCancel:
    @pytest.mark.parametrize("payment", ["pending", "completed", "failed"])
    def test_cancel_from_processing(self, payment):
        order = _pending()
        if payment == "completed":
            order.record_payment_success()
        elif payment == "failed":
            order.record_payment_failure("card_declined")

        order.cancel("changed my mind")

        assert order.order_status == OrderStatus.CANCELLED.value
        assert _events(order, OrderCancelled)[0].payment_status == payment

    def test_cannot_cancel_shipped(self):
        order = _paid()
        order.ship("TRACK-1")
        with pytest.raises(ValidationError):
            order.cancel("too late")

    def test_cannot_pay_cancelled(self):
        order = _pending()
        order.cancel("nope")
        with pytest.raises(ValidationError):
            order.record_payment_success()
