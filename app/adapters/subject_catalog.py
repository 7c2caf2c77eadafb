"""Subject (artist profile) capability lookup from the profile service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import requests
from pydantic import ValidationError

from app.config import get_settings
from app.constants.platforms import ListenPlatform, parse_listen_platform
from app.infra.logging_config import get_logger
from app.schemas.decision import SubjectCapabilities

logger = get_logger("subject_catalog")

CAPABILITIES_PATH = "/profiles/{subject_id}/capabilities"


class BaseSubjectCatalog(ABC):
    @abstractmethod
    def get_capabilities(self, subject_id: str) -> SubjectCapabilities:
        """Return what the subject supports. Never raises; unknown means nothing supported."""
        ...


class StaticSubjectCatalog(BaseSubjectCatalog):
    """Every subject supports Subscribe and every listen platform (local development)."""

    def __init__(self, capabilities: Optional[SubjectCapabilities] = None) -> None:
        self._capabilities = capabilities or SubjectCapabilities(
            supports_subscribe=True, listen_platforms=set(ListenPlatform)
        )

    def get_capabilities(self, subject_id: str) -> SubjectCapabilities:
        return self._capabilities


class HttpSubjectCatalog(BaseSubjectCatalog):
    """Reads capabilities from the profile service. Failures degrade to no capabilities."""

    def __init__(self, base_url: str, timeout_seconds: int = 5) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds

    def get_capabilities(self, subject_id: str) -> SubjectCapabilities:
        url = f"{self._base_url}{CAPABILITIES_PATH.format(subject_id=subject_id)}"
        try:
            resp = requests.get(
                url, headers={"Accept": "application/json"}, timeout=self._timeout
            )
        except requests.RequestException as e:
            logger.warning("Capability lookup failed for %s: %s", subject_id, e)
            return SubjectCapabilities(supports_subscribe=False)

        if resp.status_code != 200:
            logger.warning(
                "Capability lookup for %s returned HTTP %s", subject_id, resp.status_code
            )
            return SubjectCapabilities(supports_subscribe=False)

        try:
            data = resp.json()
        except ValueError as e:
            logger.warning("Invalid capabilities JSON for %s: %s", subject_id, e)
            return SubjectCapabilities(supports_subscribe=False)

        if not isinstance(data, dict):
            logger.warning(
                "Capabilities for %s are not a JSON object: %s", subject_id, type(data).__name__
            )
            return SubjectCapabilities(supports_subscribe=False)

        raw_platforms = data.get("listen_platforms")
        if not isinstance(raw_platforms, list):
            raw_platforms = []
        platforms = {
            p
            for p in (
                parse_listen_platform(raw) for raw in raw_platforms if isinstance(raw, str)
            )
            if p is not None
        }
        try:
            return SubjectCapabilities(
                supports_subscribe=bool(data.get("supports_subscribe", False)),
                listen_platforms=platforms,
            )
        except ValidationError as e:
            logger.warning("Invalid capabilities for %s: %s", subject_id, e)
            return SubjectCapabilities(supports_subscribe=False)


def get_subject_catalog() -> BaseSubjectCatalog:
    """FastAPI dependency: HTTP catalog when configured, static otherwise."""
    settings = get_settings()
    if settings.subject_catalog_url:
        return HttpSubjectCatalog(
            settings.subject_catalog_url,
            timeout_seconds=settings.subject_catalog_timeout_seconds,
        )
    return StaticSubjectCatalog()
