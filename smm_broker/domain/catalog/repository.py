"""Repository protocol for the service catalog."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Protocol, Sequence

from smm_broker.db.models import Service as ServiceModel


class ServiceCatalogRepository(Protocol):
    async def get_by_provider_id(self, provider_service_id: int) -> ServiceModel | None:
        ...

    async def get_by_id(self, service_id: str) -> ServiceModel | None:
        ...

    async def list_services(self, *, active_only: bool) -> Sequence[ServiceModel]:
        ...

    async def upsert(self, *, provider_service_id: int, values: dict, synced_at: datetime) -> ServiceModel:
        ...

    async def deactivate_missing(self, keep_provider_ids: Iterable[int]) -> int:
        ...
