"""Domain models for the service catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(slots=True)
class ServiceOffer:
    id: str
    provider_service_id: int
    name: str
    type: str
    category: str
    rate: Decimal
    min_quantity: int
    max_quantity: int
    is_active: bool
    refill: bool = False
    cancel: bool = False
    last_synced_at: Optional[datetime] = None

    def accepts(self, quantity: int) -> bool:
        return self.min_quantity <= quantity <= self.max_quantity


@dataclass(slots=True)
class CatalogSyncReport:
    upserted: int = 0
    deactivated: int = 0
    error: Optional[str] = None
    skipped: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None
