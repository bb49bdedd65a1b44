"""Checkout: cart -> order -> payment confirmation -> empty cart.

Steps run strictly in order and nothing is retried. The cart is cleared
only after the processor confirms the payment; every failure leaves it as
it was and surfaces a typed error from ``storefront.errors``. Trying again
is a fresh ``checkout`` call, which creates a fresh order and intent.
"""

from dataclasses import dataclass
from decimal import Decimal

import structlog

from payments.gateway import PaymentGateway, get_gateway
from storefront.cart import CartItem, CartStore
from storefront.client import StorefrontClient
from storefront.errors import GatewayError, GatewayErrorKind, ValidationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    order_id: str
    total_amount: Decimal
    payment_reference: str
    items: tuple[CartItem, ...]


class CheckoutOrchestrator:
    def __init__(
        self,
        cart: CartStore,
        client: StorefrontClient,
        gateway: PaymentGateway | None = None,
    ) -> None:
        self.cart = cart
        self.client = client
        self.gateway = gateway

    def checkout(self, shipping_address: dict, payment_method: str, payment_token: str) -> CheckoutResult:
        snapshot = self.cart.snapshot()
        if not snapshot:
            raise ValidationError({"items": ["Cart is empty"]})

        placed = self.client.create_order(snapshot, shipping_address, payment_method)
        order = placed["order"]
        log = logger.bind(order_id=order["id"], payment_reference=order.get("payment_reference"))
        log.info("order_placed", total_amount=order["total_amount"])

        gateway = self.gateway or get_gateway()
        try:
            result = gateway.confirm(placed["client_secret"], payment_token)
        except GatewayError as exc:
            log.warning("payment_confirmation_error", kind=exc.kind.value, reason=exc.reason)
            raise

        if not result.success:
            log.info("payment_declined", reason=result.failure_reason)
            raise GatewayError(GatewayErrorKind.DECLINED, result.failure_reason or "declined")

        self.cart.clear()
        log.info("checkout_completed")
        return CheckoutResult(
            order_id=order["id"],
            total_amount=Decimal(str(order["total_amount"])),
            payment_reference=result.intent_id or order.get("payment_reference"),
            items=snapshot,
        )


def checkout(
    cart: CartStore,
    client: StorefrontClient,
    shipping_address: dict,
    payment_method: str,
    payment_token: str,
    gateway: PaymentGateway | None = None,
) -> CheckoutResult:
    return CheckoutOrchestrator(cart, client, gateway).checkout(shipping_address, payment_method, payment_token)
