"""Pydantic request/response schemas for the Ordering API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int
    price: float
    name: str | None = None


class ShippingAddressRequest(BaseModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class CreateOrderRequest(BaseModel):
    """``total_amount`` is accepted for compatibility and ignored."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 2, "price": 10.0, "name": "Mug"}],
                    "shipping_address": {
                        "street": "1 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "postal_code": "62701",
                        "country": "US",
                    },
                    "payment_method": "card",
                }
            ]
        }
    }

    items: list[OrderItemRequest] = Field(default_factory=list)
    shipping_address: ShippingAddressRequest = Field(default_factory=ShippingAddressRequest)
    payment_method: str = "card"
    total_amount: float | None = None


class ShipOrderRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"tracking_number": "1Z999AA10123456784"}]}}

    tracking_number: str = Field(..., max_length=255)


class CancelOrderRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"reason": "Ordered by mistake"}]}}

    reason: str = Field(..., max_length=500)


class OrderItemResponse(BaseModel):
    product_id: str
    name: str | None = None
    quantity: int
    price_at_purchase: float


class ShippingAddressResponse(BaseModel):
    street: str
    city: str
    state: str | None = None
    postal_code: str
    country: str


class OrderResponse(BaseModel):
    id: str
    user_id: str
    items: list[OrderItemResponse]
    total_amount: float
    currency: str
    shipping_address: ShippingAddressResponse | None = None
    payment_method: str
    payment_status: str
    order_status: str
    payment_reference: str | None = None
    failure_reason: str | None = None
    tracking_number: str | None = None
    cancellation_reason: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class PlacedOrderResponse(BaseModel):
    order: OrderResponse
    client_secret: str


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
