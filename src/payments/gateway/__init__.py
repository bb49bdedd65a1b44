"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- StripeGateway for production

The default is chosen by the PAYMENT_GATEWAY setting ("fake" or "stripe").
"""

from payments.gateway.fake_adapter import FakeGateway, FakeMode
from payments.gateway.port import ConfirmationResult, GatewayEvent, PaymentGateway, PaymentIntent
from payments.gateway.stripe_adapter import StripeGateway
from shared.config import settings

_current_gateway: PaymentGateway | None = None


def _build_default() -> PaymentGateway:
    if settings.PAYMENT_GATEWAY == "stripe":
        return StripeGateway(api_key=settings.STRIPE_SECRET_KEY, webhook_secret=settings.STRIPE_WEBHOOK_SECRET)
    if settings.PAYMENT_GATEWAY == "fake":
        return FakeGateway()
    raise ValueError(f"Unknown payment gateway: {settings.PAYMENT_GATEWAY!r}")


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building the configured default on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_default()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None


__all__ = [
    "ConfirmationResult",
    "FakeGateway",
    "FakeMode",
    "GatewayEvent",
    "PaymentGateway",
    "PaymentIntent",
    "StripeGateway",
    "get_gateway",
    "reset_gateway",
    "set_gateway",
]
