"""Order fulfilment: shipping, delivery and cancellation commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import logger, ordering
from ordering.order.order import CancellationActor, Order


@ordering.command(part_of="Order")
class ShipOrder:
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=255)


@ordering.command(part_of="Order")
class DeliverOrder:
    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    cancelled_by = String(choices=CancellationActor, default=CancellationActor.CUSTOMER.value)


@ordering.command_handler(part_of=Order)
class FulfillmentHandler:
    @handle(ShipOrder)
    def ship_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.ship(command.tracking_number)
        repo.add(order)
        logger.info("order_shipped", order_id=str(order.id), tracking_number=command.tracking_number)

    @handle(DeliverOrder)
    def deliver_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.deliver()
        repo.add(order)

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel(command.reason, command.cancelled_by)
        repo.add(order)
        logger.info("order_cancelled", order_id=str(order.id), cancelled_by=command.cancelled_by)
