"""
Command to handle delivery provider feedback webhooks.

Bounces and spam complaints add automatic suppression entries for every
recipient in the event. Soft bounces (mailbox full, over quota, 4xx) expire;
hard bounces and complaints do not. Redeliveries are absorbed by the
suppression registry's idempotent add.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import re
from datetime import timedelta
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.constants.suppression import SuppressionReason
from app.schemas.webhook import DeliveryWebhookEvent
from app.services.suppression_service import SuppressionService
from app.utils.time import utcnow

BOUNCED = "email.bounced"
COMPLAINED = "email.complained"

SIGNATURE_HEADER = "webhook-signature"
TIMESTAMP_HEADER = "webhook-timestamp"

SOFT_BOUNCE_PATTERNS = [
    re.compile(r"mailbox full", re.IGNORECASE),
    re.compile(r"over quota", re.IGNORECASE),
    re.compile(r"temporarily", re.IGNORECASE),
    re.compile(r"try again", re.IGNORECASE),
    re.compile(r"rate limit", re.IGNORECASE),
    re.compile(r"\b(421|450|451|452)\b"),
]


def is_soft_bounce(message: Optional[str]) -> bool:
    return bool(message) and any(p.search(message) for p in SOFT_BOUNCE_PATTERNS)


def verify_signature(
    payload: bytes, signature: Optional[str], timestamp: Optional[str], secret: str
) -> bool:
    """
    Check a `v1,<base64 hmac-sha256>` signature (space separated list) over
    "{timestamp}.{payload}". Secrets may carry a `whsec_` prefix and are base64.
    """
    if not signature or not timestamp:
        return False
    raw_secret = secret[len("whsec_"):] if secret.startswith("whsec_") else secret
    try:
        key = base64.b64decode(raw_secret)
    except ValueError:
        return False
    signed = timestamp.encode("utf-8") + b"." + payload
    expected = base64.b64encode(hmac.new(key, signed, hashlib.sha256).digest())
    for candidate in signature.split(" "):
        version, _, provided = candidate.partition(",")
        if version == "v1" and provided and hmac.compare_digest(
            provided.encode("utf-8"), expected
        ):
            return True
    return False


class DeliveryFeedbackCommand:
    """Turn bounce/complaint feedback into suppression entries."""

    def __init__(self, db: Session, settings: Optional[Settings] = None) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.suppression_service = SuppressionService(db)
        self.logger = logging.getLogger(__name__)

    def is_authentic(self, payload: bytes, headers: Mapping[str, str]) -> bool:
        """True when no secret is configured or the signature matches."""
        secret = self.settings.delivery_webhook_secret
        if not secret:
            return True
        return verify_signature(
            payload, headers.get(SIGNATURE_HEADER), headers.get(TIMESTAMP_HEADER), secret
        )

    def execute(self, event: DeliveryWebhookEvent) -> int:
        """
        Apply one feedback event.

        Returns:
            int: number of recipients suppressed (0 for ignored event types).
        """
        if event.type == COMPLAINED:
            reason, expires_at = SuppressionReason.COMPLAINT, None
        elif event.type == BOUNCED:
            reason = SuppressionReason.BOUNCE
            bounce_message = event.data.bounce.message if event.data.bounce else None
            expires_at = (
                utcnow() + timedelta(days=self.settings.soft_bounce_suppression_days)
                if is_soft_bounce(bounce_message)
                else None
            )
        else:
            self.logger.info("Ignoring delivery webhook event type %s", event.type)
            return 0

        details = {
            "provider_event_type": event.type,
            "message_id": event.data.message_id,
        }
        if event.data.bounce:
            details["bounce_message"] = event.data.bounce.message
            details["diagnostic_code"] = event.data.bounce.diagnostic_code
        if event.data.complaint:
            details["feedback_type"] = event.data.complaint.feedback_type

        for recipient in event.data.to:
            self.suppression_service.suppress(
                recipient,
                reason,
                actor=None,
                expires_at=expires_at,
                source_event_id=event.id,
                details=details,
            )
        return len(event.data.to)
