"""
Webhook routes for delivery provider feedback.

The provider POSTs bounce and complaint events here; they become automatic
suppression entries. Requests are authenticated by signature, not by actor.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.commands.webhooks.delivery_feedback_command import DeliveryFeedbackCommand
from app.db import get_db
from app.schemas.webhook import DeliveryWebhookEvent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/delivery")
async def delivery_webhook(
    request: Request,
    db: Session = Depends(get_db),
) -> dict[str, object]:
    """Receive bounce/complaint feedback and suppress the affected recipients."""
    body = await request.body()
    command = DeliveryFeedbackCommand(db)
    if not command.is_authentic(body, request.headers):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")
    try:
        event = DeliveryWebhookEvent.model_validate(json.loads(body))
    except (ValueError, PydanticValidationError) as e:
        logger.warning("Delivery webhook invalid payload: %s", e)
        raise HTTPException(status_code=400, detail="Invalid webhook payload") from e
    suppressed = command.execute(event)
    return {"status": "ok", "suppressed": suppressed}
