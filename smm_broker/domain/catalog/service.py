"""Service catalog lookups and provider synchronisation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from sqlalchemy.ext.asyncio import AsyncSession

from smm_broker.db.models import Service as ServiceModel
from smm_broker.infrastructure.database.repositories.service_repository import SqlServiceCatalogRepository
from smm_broker.infrastructure.provider import FulfillmentClient, ProviderError

from .models import CatalogSyncReport, ServiceOffer
from .repository import ServiceCatalogRepository

logger = logging.getLogger(__name__)


def apply_markup(rate: str, markup: Decimal) -> str:
    value = Decimal(rate) * (Decimal(1) + markup)
    return format(value.normalize(), "f")


def _parse_quantity(raw: str) -> int:
    try:
        return int(Decimal(str(raw).strip()))
    except (InvalidOperation, ValueError, OverflowError):
        return 0


@dataclass(slots=True)
class CatalogService:
    repository: ServiceCatalogRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "CatalogService":
        return cls(SqlServiceCatalogRepository(session))

    async def find_active_service(self, provider_service_id: int) -> ServiceOffer | None:
        model = await self.repository.get_by_provider_id(provider_service_id)
        if model is None or not model.is_active:
            return None
        return self._to_domain(model)

    async def get_service(self, service_id: str) -> ServiceOffer | None:
        model = await self.repository.get_by_id(service_id)
        return self._to_domain(model) if model else None

    async def list_services(self, active_only: bool = True) -> list[ServiceOffer]:
        rows = await self.repository.list_services(active_only=active_only)
        return [self._to_domain(row) for row in rows]

    async def sync_from_provider(self, client: FulfillmentClient, *, markup: Decimal) -> CatalogSyncReport:
        """Upsert the provider's service list with the platform markup applied.

        Services the provider no longer offers are deactivated rather than
        deleted because existing orders reference them. A provider error
        leaves the catalog untouched.
        """
        result = await client.get_services()
        if isinstance(result, ProviderError):
            logger.error("Service sync aborted, provider returned error: %s", result.message)
            return CatalogSyncReport(error=result.message)

        report = CatalogSyncReport()
        synced_at = datetime.now(timezone.utc)
        seen: list[int] = []
        for item in result.value:
            try:
                rate = apply_markup(item.rate, markup)
            except InvalidOperation:
                logger.warning("Skipping service %s with invalid rate %r", item.service, item.rate)
                report.skipped.append(item.service)
                continue
            await self.repository.upsert(
                provider_service_id=item.service,
                values={
                    "name": item.name,
                    "type": item.type,
                    "category": item.category,
                    "rate": rate,
                    "min": item.min,
                    "max": item.max,
                    "refill": item.refill,
                    "cancel": item.cancel,
                },
                synced_at=synced_at,
            )
            seen.append(item.service)
            report.upserted += 1

        report.deactivated = await self.repository.deactivate_missing(seen)
        logger.info("Services updated: %s upserted, %s deactivated", report.upserted, report.deactivated)
        return report

    @staticmethod
    def _to_domain(model: ServiceModel) -> ServiceOffer:
        return ServiceOffer(
            id=model.id,
            provider_service_id=model.provider_service_id,
            name=model.name,
            type=model.type,
            category=model.category,
            rate=Decimal(str(model.rate)),
            min_quantity=_parse_quantity(model.min),
            max_quantity=_parse_quantity(model.max),
            is_active=bool(model.is_active),
            refill=bool(model.refill),
            cancel=bool(model.cancel),
            last_synced_at=model.last_synced_at,
        )
