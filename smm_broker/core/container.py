"""Dependency container wiring the order engine for one process."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from smm_broker.core.config import Settings, get_settings
from smm_broker.domain.catalog import CatalogService, CatalogSyncReport
from smm_broker.domain.orders.monitor import OrderStatusMonitor
from smm_broker.domain.orders.placement import OrderPlacementService
from smm_broker.domain.wallets import WalletService
from smm_broker.infrastructure.database.session import build_engine, build_session_factory
from smm_broker.infrastructure.provider import FulfillmentClient
from smm_broker.jobs import PeriodicJob

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    client: FulfillmentClient
    wallet: WalletService
    monitor: OrderStatusMonitor
    placement: OrderPlacementService
    jobs: list[PeriodicJob] = field(default_factory=list)

    async def sync_catalog(self) -> CatalogSyncReport:
        async with self.session_factory() as session, session.begin():
            return await CatalogService.with_session(session).sync_from_provider(
                self.client, markup=self.settings.provider.rate_markup
            )

    def build_jobs(self) -> list[PeriodicJob]:
        """Create the periodic jobs; they are started by the application lifespan."""
        config = self.settings.jobs
        self.jobs = [
            PeriodicJob(
                "order-status",
                config.order_status_interval,
                self.monitor.run_tick,
                run_immediately=config.run_on_startup,
            ),
            PeriodicJob(
                "placement-recovery",
                config.placement_recovery_interval,
                self.placement.recover_unrecorded,
                run_immediately=config.run_on_startup,
            ),
            PeriodicJob(
                "service-sync",
                config.service_sync_interval,
                self.sync_catalog,
                run_immediately=False,
            ),
        ]
        return self.jobs

    def start_jobs(self) -> None:
        if not self.jobs:
            self.build_jobs()
        for job in self.jobs:
            job.start()

    async def stop_jobs(self) -> None:
        for job in self.jobs:
            await job.stop()

    async def aclose(self) -> None:
        await self.stop_jobs()
        await self.client.aclose()
        await self.engine.dispose()
        logger.info("Application container closed")


def build_container(
    settings: Settings | None = None,
    *,
    engine: AsyncEngine | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ApplicationContainer:
    settings = settings or get_settings()
    engine = engine or build_engine(settings)
    session_factory = build_session_factory(engine)
    client = FulfillmentClient.from_settings(settings.provider, transport=transport)
    wallet = WalletService.from_settings(session_factory, settings.wallet)
    monitor = OrderStatusMonitor(session_factory, client, batch_size=settings.provider.batch_size)
    placement = OrderPlacementService(session_factory, client, wallet, monitor)
    return ApplicationContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        client=client,
        wallet=wallet,
        monitor=monitor,
        placement=placement,
    )


__all__ = ["ApplicationContainer", "build_container"]
