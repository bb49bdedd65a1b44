"""Configurable fake payment gateway for development and testing.

Simulates a PaymentIntent processor in memory. The outcome of ``confirm``
is set at runtime (``configure``) so tests and manual runs can exercise
success, declines, timeouts and outages without credentials. Webhooks are
accepted when signed with ``test-signature``.
"""

import json
import threading
from enum import Enum
from uuid import uuid4

from payments.gateway.port import (
    ConfirmationResult,
    GatewayEvent,
    PaymentGateway,
    PaymentIntent,
    intent_id_from_secret,
)
from shared.errors import GatewayError, GatewayErrorKind

TEST_SIGNATURE = "test-signature"


class FakeMode(Enum):
    SUCCEED = "succeed"
    DECLINE = "decline"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.mode: FakeMode = FakeMode.SUCCEED
        self.failure_reason: str = "card_declined"
        self.fail_create: bool = False
        self.calls: list[dict] = []
        self.intents: dict[str, PaymentIntent] = {}
        self._by_idempotency_key: dict[str, str] = {}
        self._lock = threading.Lock()

    def configure(self, mode: FakeMode | str, failure_reason: str = "card_declined", fail_create: bool = False) -> None:
        """Configure gateway behaviour at runtime."""
        self.mode = FakeMode(mode)
        self.failure_reason = failure_reason
        self.fail_create = fail_create

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        idempotency_key: str,
        metadata: dict | None = None,
    ) -> PaymentIntent:
        with self._lock:
            self.calls.append(
                {
                    "method": "create_intent",
                    "amount_minor_units": amount_minor_units,
                    "currency": currency,
                    "idempotency_key": idempotency_key,
                    "metadata": dict(metadata or {}),
                }
            )
            if self.fail_create:
                raise GatewayError(GatewayErrorKind.UNAVAILABLE, "Payment processor unavailable")

            existing = self._by_idempotency_key.get(idempotency_key)
            if existing is not None:
                return self.intents[existing]

            intent_id = f"pi_fake_{uuid4().hex[:16]}"
            intent = PaymentIntent(
                id=intent_id,
                client_secret=f"{intent_id}_secret_{uuid4().hex[:12]}",
                amount_minor_units=amount_minor_units,
                currency=currency,
            )
            self.intents[intent_id] = intent
            self._by_idempotency_key[idempotency_key] = intent_id
            return intent

    def confirm(self, client_secret: str, payment_method: str) -> ConfirmationResult:
        intent_id = intent_id_from_secret(client_secret)
        with self._lock:
            self.calls.append({"method": "confirm", "intent_id": intent_id, "payment_method": payment_method})

            intent = self.intents.get(intent_id)
            if intent is None:
                raise GatewayError(GatewayErrorKind.DECLINED, f"No such payment intent: {intent_id}")
            if intent.status == "succeeded":
                return ConfirmationResult(success=True, intent_id=intent_id, status="succeeded")
            if intent.status == "canceled":
                return ConfirmationResult(
                    success=False, intent_id=intent_id, status="canceled", failure_reason="intent_canceled"
                )

            if self.mode is FakeMode.TIMEOUT:
                raise GatewayError(GatewayErrorKind.AMBIGUOUS, "Timed out waiting for the payment processor")
            if self.mode is FakeMode.UNAVAILABLE:
                raise GatewayError(GatewayErrorKind.UNAVAILABLE, "Payment processor unavailable")
            if self.mode is FakeMode.DECLINE:
                self._set_status(intent, "requires_payment_method")
                return ConfirmationResult(
                    success=False,
                    intent_id=intent_id,
                    status="requires_payment_method",
                    failure_reason=self.failure_reason,
                )

            self._set_status(intent, "succeeded")
            return ConfirmationResult(success=True, intent_id=intent_id, status="succeeded")

    def cancel_intent(self, intent_id: str) -> None:
        with self._lock:
            self.calls.append({"method": "cancel_intent", "intent_id": intent_id})
            intent = self.intents.get(intent_id)
            if intent is not None and intent.status != "succeeded":
                self._set_status(intent, "canceled")

    def parse_webhook(self, payload: bytes | str, signature: str) -> GatewayEvent:
        if signature != TEST_SIGNATURE:
            raise ValueError("Invalid webhook signature")

        body = json.loads(payload)
        intent = body.get("data", {}).get("object", {})
        last_error = intent.get("last_payment_error") or {}
        return GatewayEvent(
            type=body["type"],
            intent_id=intent["id"],
            failure_reason=last_error.get("code") or last_error.get("message"),
            data=intent,
        )

    def _set_status(self, intent: PaymentIntent, status: str) -> None:
        self.intents[intent.id] = PaymentIntent(
            id=intent.id,
            client_secret=intent.client_secret,
            amount_minor_units=intent.amount_minor_units,
            currency=intent.currency,
            status=status,
        )
