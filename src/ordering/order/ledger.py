"""Order ledger: turns a checked-out cart into a persisted, payable order.

``create_order`` is all-or-nothing:

1. the request is validated (nothing is written and the processor is not
   contacted when it is invalid);
2. the total is computed here from the line items, whatever the caller
   believes it to be;
3. the processor is asked for an intent for exactly that total, keyed by the
   order id so a repeated request cannot create a second intent;
4. the order is written once, already carrying the intent id.

A gateway failure in step 3 leaves nothing behind. A write failure in step 4
cancels the intent and surfaces as ``PersistenceError``.

The single repository write runs outside a unit of work, so a failed write
raises inside ``create_order``.
"""

from dataclasses import dataclass
from decimal import Decimal

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.domain import logger
from ordering.order.order import ADDRESS_FIELDS, ADDRESS_KEYS, Order
from payments.gateway import PaymentGateway, get_gateway
from shared.config import settings
from shared.errors import GatewayError, PersistenceError
from shared.money import max_amount, parse_amount, to_minor_units


@dataclass(frozen=True)
class PlacedOrder:
    order: Order
    client_secret: str


def _validate(items, shipping_address, payment_method, currency) -> tuple[list[dict], dict]:
    """Return normalised items and address, or raise ValidationError with every problem found."""
    errors: dict[str, list[str]] = {}

    if not items:
        errors["items"] = ["Order must contain at least one item"]

    lines = []
    total = Decimal("0")
    for index, item in enumerate(items or []):
        product_id = item.get("product_id")
        quantity = item.get("quantity")
        price = item.get("price_at_purchase", item.get("price"))

        if not product_id:
            errors.setdefault("items", []).append(f"Item {index}: product_id is required")
        if (
            not isinstance(quantity, int)
            or isinstance(quantity, bool)
            or not 1 <= quantity <= settings.MAX_ITEM_QUANTITY
        ):
            errors.setdefault("items", []).append(
                f"Item {index}: quantity must be a whole number from 1 to {settings.MAX_ITEM_QUANTITY}"
            )
            quantity = None
        try:
            if price is None:
                raise ValueError("is required")
            amount = parse_amount(price, currency)
        except ValueError as exc:
            errors.setdefault("items", []).append(f"Item {index}: price {exc}")
            price = None
        else:
            price = float(amount)
            if quantity is not None:
                total += amount * quantity

        line = {"product_id": str(product_id), "quantity": quantity, "price_at_purchase": price}
        if item.get("name"):
            line["name"] = item["name"]
        lines.append(line)

    if total > max_amount(currency):
        errors.setdefault("items", []).append(f"Order total must not exceed {max_amount(currency)}")

    address = {key: (shipping_address or {}).get(key) for key in ADDRESS_KEYS}
    missing = [key for key in ADDRESS_FIELDS if not address.get(key)]
    if missing:
        errors["shipping_address"] = [f"Missing fields: {', '.join(missing)}"]

    if not payment_method:
        errors["payment_method"] = ["Payment method is required"]

    if errors:
        raise ValidationError(errors)

    return lines, {key: value for key, value in address.items() if value is not None}


def create_order(
    identity,
    items,
    shipping_address,
    payment_method,
    gateway: PaymentGateway | None = None,
    currency: str | None = None,
) -> PlacedOrder:
    """Create an order for ``identity`` and the payment intent that will charge it."""
    gateway = gateway or get_gateway()
    currency = (currency or settings.CURRENCY).lower()

    lines, address = _validate(items, shipping_address, payment_method, currency)
    order = Order.place(
        user_id=identity.user_id,
        items_data=lines,
        shipping_address=address,
        payment_method=payment_method,
        currency=currency,
    )

    amount = to_minor_units(order.total_amount, currency)
    try:
        intent = gateway.create_intent(
            amount_minor_units=amount,
            currency=currency,
            idempotency_key=str(order.id),
            metadata={"order_id": str(order.id), "user_id": str(identity.user_id)},
        )
    except GatewayError:
        logger.warning("payment_intent_failed", order_id=str(order.id), user_id=str(identity.user_id))
        raise

    order.attach_payment_intent(intent.id)

    try:
        current_domain.repository_for(Order).add(order)
    except Exception as exc:
        logger.error(
            "order_write_failed",
            order_id=str(order.id),
            payment_reference=intent.id,
            error=str(exc),
        )
        try:
            gateway.cancel_intent(intent.id)
        except GatewayError as cancel_exc:
            logger.error("payment_intent_cancel_failed", payment_reference=intent.id, error=str(cancel_exc))
        raise PersistenceError(f"Could not save order {order.id}") from exc

    logger.info(
        "order_created",
        order_id=str(order.id),
        user_id=str(identity.user_id),
        total_amount=order.total_amount,
        amount_minor_units=amount,
        payment_reference=intent.id,
    )
    return PlacedOrder(order=order, client_secret=intent.client_secret)


def get_order(identity, order_id: str) -> Order:
    """Fetch one of the caller's orders. Admins may fetch any order."""
    order = current_domain.repository_for(Order).get(order_id)
    if not identity.is_admin and str(order.user_id) != str(identity.user_id):
        raise PermissionError(f"Order {order_id} belongs to another user")
    return order


def orders_for_user(identity) -> list[Order]:
    return current_domain.repository_for(Order).for_user(identity.user_id)
