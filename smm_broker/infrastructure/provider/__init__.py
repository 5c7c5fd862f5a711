"""Fulfillment provider adapter."""

from .client import MAX_BULK_STATUS_IDS, FulfillmentClient
from .types import (
    OrderStatusReport,
    ProviderBalance,
    ProviderError,
    ProviderOk,
    ProviderResult,
    ProviderService,
)

__all__ = [
    "MAX_BULK_STATUS_IDS",
    "FulfillmentClient",
    "OrderStatusReport",
    "ProviderBalance",
    "ProviderError",
    "ProviderOk",
    "ProviderResult",
    "ProviderService",
]
