"""FastAPI endpoints for the Ordering domain."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from identity.auth import Identity, get_current_identity, require_admin
from ordering.api.schemas import (
    CancelOrderRequest,
    CreateOrderRequest,
    OrderListResponse,
    OrderResponse,
    PlacedOrderResponse,
    ShipOrderRequest,
)
from ordering.order.fulfillment import CancelOrder, DeliverOrder, ShipOrder
from ordering.order.ledger import create_order, get_order, orders_for_user
from ordering.order.order import CancellationActor

order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=PlacedOrderResponse)
async def place_order(
    body: CreateOrderRequest,
    caller: Identity = Depends(get_current_identity),
) -> PlacedOrderResponse:
    placed = create_order(
        caller,
        items=[item.model_dump() for item in body.items],
        shipping_address=body.shipping_address.model_dump(),
        payment_method=body.payment_method,
    )
    return PlacedOrderResponse(
        order=OrderResponse(**placed.order.to_dict_view()),
        client_secret=placed.client_secret,
    )


@order_router.get("", response_model=OrderListResponse)
async def my_orders(caller: Identity = Depends(get_current_identity)) -> OrderListResponse:
    return OrderListResponse(orders=[OrderResponse(**order.to_dict_view()) for order in orders_for_user(caller)])


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_details(order_id: str, caller: Identity = Depends(get_current_identity)) -> OrderResponse:
    return OrderResponse(**get_order(caller, order_id).to_dict_view())


@order_router.put("/{order_id}/ship", response_model=OrderResponse)
async def ship_order(
    order_id: str,
    body: ShipOrderRequest,
    caller: Identity = Depends(require_admin),
) -> OrderResponse:
    current_domain.process(ShipOrder(order_id=order_id, tracking_number=body.tracking_number), asynchronous=False)
    return OrderResponse(**get_order(caller, order_id).to_dict_view())


@order_router.put("/{order_id}/deliver", response_model=OrderResponse)
async def deliver_order(order_id: str, caller: Identity = Depends(require_admin)) -> OrderResponse:
    current_domain.process(DeliverOrder(order_id=order_id), asynchronous=False)
    return OrderResponse(**get_order(caller, order_id).to_dict_view())


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest,
    caller: Identity = Depends(get_current_identity),
) -> OrderResponse:
    get_order(caller, order_id)  # ownership check
    command = CancelOrder(
        order_id=order_id,
        reason=body.reason,
        cancelled_by=CancellationActor.ADMIN.value if caller.is_admin else CancellationActor.CUSTOMER.value,
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse(**get_order(caller, order_id).to_dict_view())
