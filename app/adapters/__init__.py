"""Adapters for external collaborators (delivery provider, profile service)."""

from app.adapters.base import BaseDeliveryAdapter, DeliveryResult
from app.adapters.delivery import HttpDeliveryAdapter, get_delivery_adapter
from app.adapters.subject_catalog import (
    BaseSubjectCatalog,
    HttpSubjectCatalog,
    StaticSubjectCatalog,
    get_subject_catalog,
)

__all__ = [
    "BaseDeliveryAdapter",
    "BaseSubjectCatalog",
    "DeliveryResult",
    "HttpDeliveryAdapter",
    "HttpSubjectCatalog",
    "StaticSubjectCatalog",
    "get_delivery_adapter",
    "get_subject_catalog",
]
