"""Pydantic response schemas for the Payments API."""

from __future__ import annotations

from pydantic import BaseModel


class WebhookResponse(BaseModel):
    status: str
    event_type: str | None = None
    order_id: str | None = None
