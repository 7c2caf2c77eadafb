"""
Delivery adapter interface.

Adapters encapsulate the outbound email/SMS provider. The scheduler treats
send() as a black box with a binary outcome and never relies on provider-side
idempotency.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class DeliveryResult:
    """Outcome of one send attempt."""

    success: bool
    provider_message_id: Optional[str] = None
    error: Optional[str] = None


class BaseDeliveryAdapter(ABC):
    """Contract for delivery providers. New providers implement this interface."""

    @abstractmethod
    def send(
        self, recipient_id: str, action_type: str, payload: dict[str, Any]
    ) -> DeliveryResult:
        """Send one automated message. Return success or failure; raise DeliveryFailure on transport errors."""
        ...
