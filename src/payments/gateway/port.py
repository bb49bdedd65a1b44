"""Payment gateway port (abstract interface).

Defines the PaymentIntent contract every adapter implements, so that the
order ledger, the webhook endpoint and the checkout client work the same
against FakeGateway (dev/test) and StripeGateway (production).

Outcome rules shared by all adapters:

- a decline is a normal result: ``ConfirmationResult(success=False, ...)``;
- an outcome the adapter cannot determine (timeout, dropped connection,
  processor 5xx while confirming) raises ``GatewayError(AMBIGUOUS)``;
- a processor that cannot be reached before anything happened raises
  ``GatewayError(UNAVAILABLE)``;
- nothing is retried here.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PaymentIntent:
    """A processor-side record authorising a specific amount for one order."""

    id: str
    client_secret: str
    amount_minor_units: int
    currency: str
    status: str = "requires_payment_method"


@dataclass(frozen=True)
class ConfirmationResult:
    """Result of confirming a payment intent with a payment method."""

    success: bool
    intent_id: str | None = None
    status: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class GatewayEvent:
    """A verified webhook notification about an intent."""

    type: str
    intent_id: str
    failure_reason: str | None = None
    data: dict = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.type == "payment_intent.succeeded"

    @property
    def failed(self) -> bool:
        return self.type == "payment_intent.payment_failed"


def intent_id_from_secret(client_secret: str) -> str:
    """Client secrets are ``<intent id>_secret_<token>``."""
    return client_secret.split("_secret_")[0]


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        idempotency_key: str,
        metadata: dict | None = None,
    ) -> PaymentIntent:
        """Create an intent for exactly ``amount_minor_units``."""
        ...

    @abstractmethod
    def confirm(self, client_secret: str, payment_method: str) -> ConfirmationResult:
        """Confirm an intent. Safe to call again for the same client secret."""
        ...

    @abstractmethod
    def cancel_intent(self, intent_id: str) -> None:
        """Cancel an unconfirmed intent."""
        ...

    @abstractmethod
    def parse_webhook(self, payload: bytes | str, signature: str) -> GatewayEvent:
        """Verify a webhook payload and return the event it describes.

        Raises ``ValueError`` when the signature does not match.
        """
        ...
