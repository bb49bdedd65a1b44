"""Stripe payment gateway adapter.

Wraps the stripe-python PaymentIntents API and webhook signature
verification behind the PaymentGateway port. The API key is passed per call
so several gateways with different keys can coexist in one process.
"""

import stripe
import structlog

from payments.gateway.port import (
    ConfirmationResult,
    GatewayEvent,
    PaymentGateway,
    PaymentIntent,
    intent_id_from_secret,
)
from shared.errors import GatewayError, GatewayErrorKind

logger = structlog.get_logger(__name__)

_SUCCESS_STATUSES = {"succeeded", "requires_capture"}


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(self, api_key: str, webhook_secret: str, timeout: float = 30.0) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.timeout = timeout

    def create_intent(
        self,
        amount_minor_units: int,
        currency: str,
        idempotency_key: str,
        metadata: dict | None = None,
    ) -> PaymentIntent:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor_units,
                currency=currency,
                payment_method_types=["card"],
                metadata=metadata or {},
                idempotency_key=idempotency_key,
                api_key=self.api_key,
            )
        except stripe.InvalidRequestError as exc:
            raise GatewayError(GatewayErrorKind.DECLINED, exc.user_message or str(exc)) from exc
        except stripe.StripeError as exc:
            # Nothing was authorised yet, so any transport or processor error
            # here leaves no charge behind.
            logger.warning("stripe_create_intent_failed", error=str(exc), idempotency_key=idempotency_key)
            raise GatewayError(GatewayErrorKind.UNAVAILABLE, str(exc)) from exc

        return PaymentIntent(
            id=intent["id"],
            client_secret=intent["client_secret"],
            amount_minor_units=intent["amount"],
            currency=intent["currency"],
            status=intent["status"],
        )

    def confirm(self, client_secret: str, payment_method: str) -> ConfirmationResult:
        intent_id = intent_id_from_secret(client_secret)
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self.api_key)
            if intent["status"] not in _SUCCESS_STATUSES:
                intent = stripe.PaymentIntent.confirm(
                    intent_id,
                    payment_method=payment_method,
                    api_key=self.api_key,
                )
        except stripe.CardError as exc:
            return ConfirmationResult(
                success=False,
                intent_id=intent_id,
                status="requires_payment_method",
                failure_reason=exc.code or exc.user_message or "card_error",
            )
        except (stripe.APIConnectionError, stripe.APIError) as exc:
            logger.warning("stripe_confirm_ambiguous", intent_id=intent_id, error=str(exc))
            raise GatewayError(GatewayErrorKind.AMBIGUOUS, str(exc)) from exc
        except stripe.InvalidRequestError as exc:
            raise GatewayError(GatewayErrorKind.DECLINED, exc.user_message or str(exc)) from exc
        except stripe.StripeError as exc:
            raise GatewayError(GatewayErrorKind.UNAVAILABLE, str(exc)) from exc

        return self._result_from_intent(intent)

    def cancel_intent(self, intent_id: str) -> None:
        try:
            stripe.PaymentIntent.cancel(intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            raise GatewayError(GatewayErrorKind.UNAVAILABLE, str(exc)) from exc

    def parse_webhook(self, payload: bytes | str, signature: str) -> GatewayEvent:
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as exc:
            raise ValueError("Invalid webhook signature") from exc

        intent = event["data"]["object"]
        last_error = intent.get("last_payment_error") or {}
        return GatewayEvent(
            type=event["type"],
            intent_id=intent["id"],
            failure_reason=last_error.get("code") or last_error.get("message"),
            data=dict(intent),
        )

    @staticmethod
    def _result_from_intent(intent) -> ConfirmationResult:
        status = intent["status"]
        if status in _SUCCESS_STATUSES:
            return ConfirmationResult(success=True, intent_id=intent["id"], status=status)
        if status == "processing":
            raise GatewayError(GatewayErrorKind.AMBIGUOUS, "Payment is still processing")
        if status == "requires_action":
            return ConfirmationResult(
                success=False,
                intent_id=intent["id"],
                status=status,
                failure_reason="authentication_required",
            )

        last_error = intent.get("last_payment_error") or {}
        return ConfirmationResult(
            success=False,
            intent_id=intent["id"],
            status=status,
            failure_reason=last_error.get("code") or status,
        )
