"""Delivery provider webhook payloads (bounce / complaint feedback)."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class BounceInfo(BaseModel):
    message: Optional[str] = None
    diagnostic_code: Optional[str] = None


class ComplaintInfo(BaseModel):
    feedback_type: Optional[str] = None


class DeliveryWebhookData(BaseModel):
    message_id: Optional[str] = None
    to: list[str] = Field(default_factory=list)
    bounce: Optional[BounceInfo] = None
    complaint: Optional[ComplaintInfo] = None


class DeliveryWebhookEvent(BaseModel):
    """Provider feedback event, e.g. email.bounced / email.complained."""

    id: Optional[str] = None
    type: str
    data: DeliveryWebhookData
