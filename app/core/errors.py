"""Error taxonomy shared by services, commands, tasks and routers."""

from __future__ import annotations

from typing import Optional


class FanflowError(Exception):
    """Base class for domain errors."""


class ValidationError(FanflowError):
    """Malformed event or command. Rejected synchronously, never retried."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class TransientStoreError(FanflowError):
    """Store unavailable or timed out. Callers retry with backoff."""


class DeliveryFailure(FanflowError):
    """Delivery provider rejected the send or could not be reached."""


class SuppressionOverrideRequired(FanflowError):
    """Unsuppress would remove automatic (recipient-initiated) entries without override."""

    def __init__(self, recipient_id: str, reasons: list[str]) -> None:
        super().__init__(
            f"Recipient {recipient_id} has automatic suppression entries "
            f"({', '.join(sorted(reasons))}); override is required to remove them"
        )
        self.recipient_id = recipient_id
        self.reasons = reasons
