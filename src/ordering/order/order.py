"""Order aggregate: the record of what a customer bought and was charged.

The total is fixed when the order is placed: it is the exact sum of
``price_at_purchase * quantity`` over the items and is never recomputed from
current catalogue prices.

Order status and payment status move independently:

    processing/pending --record_payment_success--> processing/completed
    processing/pending --record_payment_failure--> processing/failed
    processing/completed --ship--> shipped --deliver--> delivered
    processing/* --cancel--> cancelled

Repeating the payment outcome an order already has is a no-op, so webhook
redelivery is harmless.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderShipped,
    PaymentConfirmed,
    PaymentFailed,
)
from shared.money import quantize, sum_lines


class OrderStatus(Enum):
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class CancellationActor(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"
    SYSTEM = "system"


ADDRESS_KEYS = ("street", "city", "state", "postal_code", "country")
ADDRESS_FIELDS = ("street", "city", "postal_code", "country")  # required


@ordering.value_object(part_of="Order")
class ShippingAddress:
    """Where the order goes. Captured at checkout and never changed."""

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@ordering.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(max_length=200)
    quantity = Integer(required=True, min_value=1)
    price_at_purchase = Float(required=True, min_value=0.0)


@ordering.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total_amount = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="usd")
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(required=True, max_length=50)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    order_status = String(choices=OrderStatus, default=OrderStatus.PROCESSING.value)
    payment_reference = String(max_length=255)
    failure_reason = String(max_length=500)
    tracking_number = String(max_length=255)
    cancellation_reason = String(max_length=500)
    cancelled_by = String(max_length=50)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_equal_sum_of_items(self):
        if not self.items:
            return
        expected = sum_lines(((item.price_at_purchase, item.quantity) for item in self.items), self.currency)
        if quantize(self.total_amount, self.currency) != expected:
            raise ValidationError({"total_amount": [f"Total {self.total_amount} does not match items ({expected})"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, user_id, items_data, shipping_address, payment_method, currency="usd"):
        """Build an unsaved order from validated line items.

        ``items_data`` is a list of dicts with product_id, quantity,
        price_at_purchase and optionally name.
        """
        if not items_data:
            raise ValidationError({"items": ["Order must contain at least one item"]})

        now = datetime.now(UTC)
        total = sum_lines(((item["price_at_purchase"], item["quantity"]) for item in items_data), currency)
        return cls(
            user_id=str(user_id),
            items=[OrderItem(**item) for item in items_data],
            total_amount=float(total),
            currency=currency,
            shipping_address=ShippingAddress(**shipping_address),
            payment_method=payment_method,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def attach_payment_intent(self, intent_id):
        """Record the processor intent that will charge this order."""
        if self.payment_reference:
            raise ValidationError({"payment_reference": ["Order already has a payment intent"]})

        self.payment_reference = intent_id
        self.raise_(
            OrderPlaced(
                order_id=str(self.id),
                user_id=str(self.user_id),
                total_amount=self.total_amount,
                currency=self.currency,
                payment_reference=intent_id,
                item_count=sum(item.quantity for item in self.items),
                placed_at=self.created_at,
            )
        )

    def record_payment_success(self):
        if self.payment_status == PaymentStatus.COMPLETED.value:
            return
        self._require_intent()
        self._require(OrderStatus.PROCESSING, PaymentStatus.PENDING, "record a payment success")

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.COMPLETED.value
        self.updated_at = now
        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                payment_reference=self.payment_reference,
                confirmed_at=now,
            )
        )

    def record_payment_failure(self, reason):
        if self.payment_status == PaymentStatus.FAILED.value:
            return
        self._require_intent()
        self._require(OrderStatus.PROCESSING, PaymentStatus.PENDING, "record a payment failure")

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.FAILED.value
        self.failure_reason = reason
        self.updated_at = now
        self.raise_(
            PaymentFailed(
                order_id=str(self.id),
                payment_reference=self.payment_reference,
                reason=reason,
                failed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Fulfilment
    # -------------------------------------------------------------------
    def ship(self, tracking_number):
        if not tracking_number:
            raise ValidationError({"tracking_number": ["Tracking number is required"]})
        self._require(OrderStatus.PROCESSING, PaymentStatus.COMPLETED, "ship")

        now = datetime.now(UTC)
        self.order_status = OrderStatus.SHIPPED.value
        self.tracking_number = tracking_number
        self.updated_at = now
        self.raise_(OrderShipped(order_id=str(self.id), tracking_number=tracking_number, shipped_at=now))

    def deliver(self):
        if self.order_status != OrderStatus.SHIPPED.value:
            raise ValidationError({"order_status": [f"Cannot deliver an order that is {self.order_status}"]})

        now = datetime.now(UTC)
        self.order_status = OrderStatus.DELIVERED.value
        self.updated_at = now
        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=now))

    def cancel(self, reason, cancelled_by=CancellationActor.CUSTOMER.value):
        if self.order_status != OrderStatus.PROCESSING.value:
            raise ValidationError({"order_status": [f"Cannot cancel an order that is {self.order_status}"]})

        now = datetime.now(UTC)
        self.order_status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_by = cancelled_by
        self.updated_at = now
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                reason=reason,
                cancelled_by=cancelled_by,
                payment_status=self.payment_status,
                cancelled_at=now,
            )
        )

    def to_dict_view(self) -> dict:
        address = self.shipping_address
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "items": [
                {
                    "product_id": str(item.product_id),
                    "name": item.name,
                    "quantity": item.quantity,
                    "price_at_purchase": item.price_at_purchase,
                }
                for item in self.items
            ],
            "total_amount": self.total_amount,
            "currency": self.currency,
            "shipping_address": (
                {key: getattr(address, key) for key in ADDRESS_KEYS} if address is not None else None
            ),
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "order_status": self.order_status,
            "payment_reference": self.payment_reference,
            "failure_reason": self.failure_reason,
            "tracking_number": self.tracking_number,
            "cancellation_reason": self.cancellation_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def _require(self, order_status, payment_status, action):
        if self.order_status != order_status.value or self.payment_status != payment_status.value:
            raise ValidationError(
                {"order_status": [f"Cannot {action} when order is {self.order_status}/{self.payment_status}"]}
            )

    def _require_intent(self):
        if not self.payment_reference:
            raise ValidationError({"payment_reference": ["Order has no payment intent"]})


@ordering.repository(part_of=Order)
class OrderRepository:
    def find_by_payment_reference(self, payment_reference: str) -> Order | None:
        results = self._dao.query.filter(payment_reference=payment_reference).all()
        return results.items[0] if results.items else None

    def for_user(self, user_id: str, limit: int = 100) -> list[Order]:
        return list(
            self._dao.query.filter(user_id=str(user_id)).order_by(["-created_at", "-id"]).limit(limit).all().items
        )
