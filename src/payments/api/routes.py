"""Payment processor webhook endpoint.

The processor reports intent outcomes here. A verified ``succeeded`` or
``payment_failed`` event is recorded on the order holding that payment
reference. Other event types, unknown references and outcomes the order can
no longer accept are acknowledged and logged so the processor stops
redelivering them.
"""

import structlog
from fastapi import APIRouter, Header, HTTPException, Request
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from ordering.order.payment import RecordPaymentFailure, RecordPaymentSuccess
from payments.api.schemas import WebhookResponse
from payments.gateway import get_gateway
from shared.logging import bind_context

logger = structlog.get_logger(__name__)

payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/webhook", response_model=WebhookResponse)
async def process_webhook(
    request: Request,
    x_gateway_signature: str = Header(default=""),
    stripe_signature: str = Header(default=""),
) -> WebhookResponse:
    payload = await request.body()
    try:
        event = get_gateway().parse_webhook(payload, x_gateway_signature or stripe_signature)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail="Invalid webhook signature") from exc

    bind_context(payment_reference=event.intent_id)
    if event.succeeded:
        command = RecordPaymentSuccess(payment_reference=event.intent_id)
    elif event.failed:
        command = RecordPaymentFailure(payment_reference=event.intent_id, reason=event.failure_reason)
    else:
        return WebhookResponse(status="ignored", event_type=event.type)

    try:
        order_id = current_domain.process(command, asynchronous=False)
    except ObjectNotFoundError:
        logger.warning("webhook_for_unknown_intent", event_type=event.type, payment_reference=event.intent_id)
        return WebhookResponse(status="ignored", event_type=event.type)
    except ValidationError as exc:
        logger.warning(
            "webhook_outcome_rejected",
            event_type=event.type,
            payment_reference=event.intent_id,
            errors=exc.messages,
        )
        return WebhookResponse(status="ignored", event_type=event.type)

    return WebhookResponse(status="processed", event_type=event.type, order_id=order_id)
