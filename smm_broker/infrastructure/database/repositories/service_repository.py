"""SQLAlchemy implementation for the service catalog."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

from sqlalchemy import select, update

from smm_broker.db.models import Service
from smm_broker.domain.common import AsyncRepository


class SqlServiceCatalogRepository(AsyncRepository[Service]):
    async def get_by_provider_id(self, provider_service_id: int) -> Service | None:
        stmt = select(Service).where(Service.provider_service_id == provider_service_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_id(self, service_id: str) -> Service | None:
        stmt = select(Service).where(Service.id == service_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_services(self, *, active_only: bool) -> Sequence[Service]:
        stmt = select(Service)
        if active_only:
            stmt = stmt.where(Service.is_active.is_(True))
        stmt = stmt.order_by(Service.category, Service.provider_service_id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def upsert(self, *, provider_service_id: int, values: dict, synced_at: datetime) -> Service:
        service = await self.get_by_provider_id(provider_service_id)
        if service is None:
            service = Service(provider_service_id=provider_service_id)
            self.session.add(service)
        for key, value in values.items():
            setattr(service, key, value)
        service.is_active = True
        service.last_synced_at = synced_at
        await self.session.flush()
        return service

    async def deactivate_missing(self, keep_provider_ids: Iterable[int]) -> int:
        keep = list(keep_provider_ids)
        stmt = update(Service).where(Service.is_active.is_(True))
        if keep:
            stmt = stmt.where(Service.provider_service_id.not_in(keep))
        result = await self.session.execute(stmt.values(is_active=False).execution_options(synchronize_session=False))
        return result.rowcount or 0
