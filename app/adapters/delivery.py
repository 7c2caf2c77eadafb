"""HTTP delivery provider adapter and registry."""

from __future__ import annotations

from typing import Any, Optional

import requests

from app.adapters.base import BaseDeliveryAdapter, DeliveryResult
from app.config import get_settings
from app.core.errors import DeliveryFailure
from app.infra.logging_config import get_logger

logger = get_logger("delivery")

SEND_PATH = "/messages"


class HttpDeliveryAdapter(BaseDeliveryAdapter):
    """POSTs a normalised message to the provider API. 2xx is success."""

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        timeout_seconds: int = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout_seconds
        self._session = session or requests.Session()

    def send(
        self, recipient_id: str, action_type: str, payload: dict[str, Any]
    ) -> DeliveryResult:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        body = {
            "to": recipient_id,
            "channel": payload.get("channel", "email"),
            "template": action_type,
            "data": payload,
        }
        try:
            resp = self._session.post(
                f"{self._api_url}{SEND_PATH}",
                json=body,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise DeliveryFailure(f"Delivery provider unreachable: {e}") from e

        if not 200 <= resp.status_code < 300:
            logger.warning(
                "Delivery provider rejected %s to %s: HTTP %s",
                action_type,
                recipient_id,
                resp.status_code,
            )
            return DeliveryResult(
                success=False,
                error=f"HTTP {resp.status_code}: {resp.text[:500] if resp.text else 'no body'}",
            )

        message_id = None
        try:
            data = resp.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("id") is not None:
            message_id = str(data["id"])
        return DeliveryResult(success=True, provider_message_id=message_id)


def get_delivery_adapter() -> Optional[BaseDeliveryAdapter]:
    """Build the configured delivery adapter, or None when delivery is disabled."""
    settings = get_settings()
    if not settings.delivery_enabled or not settings.delivery_api_url:
        return None
    return HttpDeliveryAdapter(
        api_url=settings.delivery_api_url,
        api_key=settings.delivery_api_key,
        timeout_seconds=settings.delivery_timeout_seconds,
    )
