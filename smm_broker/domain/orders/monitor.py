"""Status reconciliation between local orders and the fulfillment provider.

Each tick re-reads every open order from storage, asks the provider for their
statuses in batches, and writes back the orders whose status changed. The
in-memory working set is only an index over open orders; it is replaced from
storage at the start of every tick and can be rebuilt at any time.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Iterator, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from smm_broker.infrastructure.database.repositories.order_repository import SqlOrderRepository
from smm_broker.infrastructure.provider import FulfillmentClient, OrderStatusReport, ProviderError, ProviderResult

from .models import OPEN_STATUSES, TERMINAL_STATUSES, OrderStatus, can_transition, parse_count
from .repository import OrderRepository

logger = logging.getLogger(__name__)

PROVIDER_BATCH_LIMIT = 100


def chunked(items: Sequence[int], size: int) -> Iterator[list[int]]:
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


class PendingOrderSet:
    """Thread-safe set of provider order ids believed to be open."""

    def __init__(self, order_ids: Iterable[int] = ()) -> None:
        self._lock = threading.Lock()
        self._ids: set[int] = set(order_ids)

    def add(self, order_id: int) -> None:
        with self._lock:
            self._ids.add(order_id)

    def discard(self, order_id: int) -> None:
        with self._lock:
            self._ids.discard(order_id)

    def replace(self, order_ids: Iterable[int]) -> None:
        fresh = set(order_ids)
        with self._lock:
            self._ids = fresh

    def snapshot(self) -> list[int]:
        with self._lock:
            return sorted(self._ids)

    def __contains__(self, order_id: object) -> bool:
        with self._lock:
            return order_id in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)


@dataclass(slots=True)
class TickReport:
    monitored: int = 0
    batches: int = 0
    updated: int = 0
    settled: int = 0
    errors: int = 0
    rejected: int = 0
    failed: bool = False
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


class OrderStatusMonitor:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        client: FulfillmentClient,
        *,
        batch_size: int = PROVIDER_BATCH_LIMIT,
        pending: PendingOrderSet | None = None,
        repository_factory: Callable[[AsyncSession], OrderRepository] = SqlOrderRepository,
    ) -> None:
        if not 1 <= batch_size <= PROVIDER_BATCH_LIMIT:
            raise ValueError(f"batch_size must be between 1 and {PROVIDER_BATCH_LIMIT}")
        self._session_factory = session_factory
        self._client = client
        self._repository_factory = repository_factory
        self.batch_size = batch_size
        self.pending = pending if pending is not None else PendingOrderSet()
        self.last_report: TickReport | None = None

    async def initialize(self) -> int:
        """Rebuild the working set from storage."""
        open_orders = await self._load_open_orders()
        self.pending.replace(open_orders)
        logger.info("Initialized pending orders monitor with %s orders", len(self.pending))
        return len(self.pending)

    def register(self, order_id: int) -> None:
        self.pending.add(order_id)

    async def run_tick(self) -> TickReport:
        report = TickReport(started_at=datetime.now(timezone.utc))
        try:
            await self._reconcile(report)
        except Exception:
            report.failed = True
            logger.exception("Order status check failed")
        report.finished_at = datetime.now(timezone.utc)
        self.last_report = report
        logger.info(
            "Status check complete: %s updated, %s completed/cancelled, %s errors",
            report.updated,
            report.settled,
            report.errors,
        )
        return report

    async def _reconcile(self, report: TickReport) -> None:
        open_orders = await self._load_open_orders()
        self.pending.replace(open_orders)
        report.monitored = len(open_orders)
        logger.info("Monitoring %s pending orders", report.monitored)
        if not open_orders:
            logger.info("No pending orders to monitor")
            return

        batches = list(chunked(sorted(open_orders), self.batch_size))
        report.batches = len(batches)
        logger.info("Processing %s batch(es) of orders", report.batches)

        for batch in batches:
            try:
                result = await self._client.get_bulk_status(batch)
            except Exception:
                report.errors += 1
                logger.exception("Error processing batch of %s orders", len(batch))
                continue
            if isinstance(result, ProviderError):
                report.errors += 1
                logger.error("Status batch of %s orders failed: %s", len(batch), result.message)
                continue

            for order_id, entry in result.value.items():
                try:
                    await self._apply(order_id, entry, open_orders, report)
                except Exception:
                    report.errors += 1
                    logger.exception("Failed to apply status for order %s", order_id)

    async def _apply(
        self,
        order_id: int,
        entry: ProviderResult[OrderStatusReport],
        open_orders: dict[int, str],
        report: TickReport,
    ) -> None:
        if isinstance(entry, ProviderError):
            report.errors += 1
            logger.warning("Error for order %s: %s", order_id, entry.message)
            return

        known = open_orders.get(order_id)
        if known is None:
            logger.warning("Order %s not found in monitored orders", order_id)
            return

        new_status = OrderStatus.from_provider(entry.value.status)
        if new_status is None:
            report.errors += 1
            logger.warning("Unknown status %r for order %s", entry.value.status, order_id)
            return

        current = OrderStatus.from_provider(known)
        if current is new_status:
            return
        if current is not None and not can_transition(current, new_status):
            report.rejected += 1
            logger.warning("Ignoring transition %s -> %s for order %s", current.value, new_status.value, order_id)
            return

        changed = await self._persist(
            order_id,
            status=new_status,
            start_count=parse_count(entry.value.start_count),
            remains=parse_count(entry.value.remains),
        )
        if not changed:
            # Settled by another writer since the resync.
            self.pending.discard(order_id)
            logger.info("Order %s is no longer open, skipping", order_id)
            return

        report.updated += 1
        open_orders[order_id] = new_status.value
        if new_status.is_terminal:
            self.pending.discard(order_id)
            report.settled += 1
            logger.info("Order %s %s", order_id, new_status.value.lower())
        else:
            logger.info("Order %s status updated to %s", order_id, new_status.value)

    async def _load_open_orders(self) -> dict[int, str]:
        async with self._session_factory() as session:
            repository = self._repository_factory(session)
            rows = await repository.list_open_orders([status.value for status in OPEN_STATUSES])
        return dict(rows)

    async def _persist(self, order_id: int, *, status: OrderStatus, start_count: int, remains: int) -> bool:
        async with self._session_factory() as session, session.begin():
            repository = self._repository_factory(session)
            return await repository.update_progress(
                order_id,
                status=status.value,
                start_count=start_count,
                remains=remains,
                terminal_statuses=[item.value for item in TERMINAL_STATUSES],
            )
