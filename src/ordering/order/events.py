"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """An order was recorded with a payment intent sized to its total."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    total_amount = Float(required=True)
    currency = String(required=True)
    payment_reference = String(required=True)
    item_count = Integer(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentConfirmed:
    """The processor reported the order's payment intent as succeeded."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_reference = String(required=True)
    confirmed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentFailed:
    """The processor reported the order's payment attempt as failed."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_reference = String(required=True)
    reason = String(required=True)
    failed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    shipped_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """An order was cancelled before it shipped."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = String(required=True)
    cancelled_by = String(required=True)
    payment_status = String(required=True)
    cancelled_at = DateTime(required=True)
