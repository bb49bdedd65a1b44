"""Payment outcomes reported by the processor: commands and handler.

Orders are located by their payment reference (the processor's intent id),
which is all a webhook carries.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import String
from protean.utils.globals import current_domain

from ordering.domain import logger, ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class RecordPaymentSuccess:
    payment_reference = String(required=True, max_length=255)


@ordering.command(part_of="Order")
class RecordPaymentFailure:
    payment_reference = String(required=True, max_length=255)
    reason = String(max_length=500)


def _order_for(payment_reference):
    order = current_domain.repository_for(Order).find_by_payment_reference(payment_reference)
    if order is None:
        raise ObjectNotFoundError(f"No order with payment reference {payment_reference}")
    return order


@ordering.command_handler(part_of=Order)
class PaymentOutcomeHandler:
    @handle(RecordPaymentSuccess)
    def record_success(self, command):
        order = _order_for(command.payment_reference)
        order.record_payment_success()
        current_domain.repository_for(Order).add(order)
        logger.info("payment_recorded", order_id=str(order.id), payment_reference=command.payment_reference)
        return str(order.id)

    @handle(RecordPaymentFailure)
    def record_failure(self, command):
        order = _order_for(command.payment_reference)
        order.record_payment_failure(command.reason or "payment_failed")
        current_domain.repository_for(Order).add(order)
        logger.info(
            "payment_failure_recorded",
            order_id=str(order.id),
            payment_reference=command.payment_reference,
            reason=order.failure_reason,
        )
        return str(order.id)
