"""Order placement: validate, reserve, submit upstream, record.

The reservation and the order row live in different transactions, so the
placement is tracked through an ``order_placements`` record. A failed upstream
call is compensated with a refund; an upstream success that could not be
recorded locally is left as ``unrecorded`` for :meth:`recover_unrecorded`.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from smm_broker.db.models import Order as OrderModel, OrderPlacement as PlacementModel
from smm_broker.domain.activities.service import ActivityService
from smm_broker.domain.catalog import CatalogService, ServiceOffer
from smm_broker.domain.wallets import WalletService
from smm_broker.infrastructure.database.repositories.order_repository import (
    SqlOrderRepository,
    SqlPlacementRepository,
)
from smm_broker.infrastructure.provider import FulfillmentClient, ProviderError

from .exceptions import (
    InsufficientFundsError,
    OrderPersistenceError,
    OrderPlacementError,
    OrderValidationError,
    ServiceUnavailableError,
)
from .models import Order, OrderStatus, Placement, PlacementStatus, RecoveryReport
from .monitor import OrderStatusMonitor
from .repository import OrderRepository, PlacementRepository

logger = logging.getLogger(__name__)

CHARGE_QUANTUM = Decimal("0.0001")
PLACED_ORDER_ACTIVITY = "placed an order."


def placement_from_model(model: PlacementModel) -> Placement:
    return Placement(
        id=model.id,
        user_id=model.user_id,
        service_id=model.service_id,
        provider_service_id=model.provider_service_id,
        link=model.link,
        quantity=model.quantity,
        charge=Decimal(model.charge),
        status=PlacementStatus(model.status),
        external_order_id=int(model.external_order_id) if model.external_order_id is not None else None,
        error_message=model.error_message,
        created_at=model.created_at,
    )


def order_from_model(model: OrderModel) -> Order:
    return Order(
        id=model.id,
        order_id=int(model.order_id),
        user_id=model.user_id,
        service_id=model.service_id,
        link=model.link,
        quantity=model.quantity,
        charge=Decimal(model.charge),
        start_count=model.start_count or 0,
        remains=model.remains or 0,
        status=OrderStatus.from_provider(model.status) or OrderStatus.PENDING,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class OrderPlacementService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        client: FulfillmentClient,
        wallet: WalletService,
        monitor: OrderStatusMonitor,
        *,
        order_repository_factory: Callable[[AsyncSession], OrderRepository] = SqlOrderRepository,
        placement_repository_factory: Callable[[AsyncSession], PlacementRepository] = SqlPlacementRepository,
        recovery_batch_size: int = 100,
    ) -> None:
        self._session_factory = session_factory
        self._client = client
        self._wallet = wallet
        self._monitor = monitor
        self._order_repository_factory = order_repository_factory
        self._placement_repository_factory = placement_repository_factory
        self.recovery_batch_size = recovery_batch_size

    async def place_order(
        self,
        *,
        user_id: str,
        service_id: Optional[int],
        link: Optional[str],
        quantity: Optional[int],
    ) -> Order:
        """Place an order for ``quantity`` units of provider service ``service_id``.

        Raises:
            OrderValidationError: the request was rejected before any side effect.
            InsufficientFundsError: the wallet could not cover the charge.
            OrderPlacementError: the provider refused or failed; the charge was refunded.
            OrderPersistenceError: the provider accepted the order but it was not stored.
        """
        link = (link or "").strip()
        if service_id is None or not link or quantity is None:
            raise OrderValidationError("service, link and quantity are required")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise OrderValidationError("quantity must be a positive integer")

        service = await self._find_service(service_id)
        if service is None:
            raise ServiceUnavailableError(f"service {service_id} is not available")
        if not service.accepts(quantity):
            raise OrderValidationError(
                f"quantity must be between {service.min_quantity} and {service.max_quantity}"
            )
        charge = (service.rate * quantity).quantize(CHARGE_QUANTUM)

        if not await self._wallet.reserve(user_id, charge, description=f"Order for service {service_id}"):
            raise InsufficientFundsError("insufficient balance")

        try:
            placement_id = await self._create_placement(user_id, service, link, quantity, charge)
        except Exception:
            await self._wallet.refund(user_id, charge, description="Order placement aborted")
            raise

        external_id = await self._submit(placement_id, user_id, service, link, quantity, charge)

        try:
            order = await self._record(placement_id, external_id, user_id, service.id, link, quantity, charge)
        except Exception as exc:
            await self._mark_placement(placement_id, PlacementStatus.UNRECORDED, external_order_id=external_id)
            logger.error(
                "Order %s was placed upstream but could not be recorded for user %s (placement %s)",
                external_id,
                user_id,
                placement_id,
                exc_info=True,
            )
            raise OrderPersistenceError(
                "order was placed but could not be recorded", external_order_id=external_id
            ) from exc

        self._monitor.register(order.order_id)
        await self._record_activity(user_id)
        logger.info("Order %s placed for user %s, charge %s", order.order_id, user_id, charge)
        return order

    async def recover_unrecorded(self) -> RecoveryReport:
        """Create local orders for placements the provider accepted but we never stored."""
        report = RecoveryReport()
        async with self._session_factory() as session:
            repository = self._placement_repository_factory(session)
            pending = await repository.list_by_status(PlacementStatus.UNRECORDED.value, self.recovery_batch_size)
            stuck = await repository.list_by_status(PlacementStatus.SUBMITTING.value, self.recovery_batch_size)
            placements = [placement_from_model(row) for row in pending]
            report.stuck_submitting = len(stuck)

        for placement in placements:
            async with self._session_factory() as session, session.begin():
                orders = self._order_repository_factory(session)
                placements_repo = self._placement_repository_factory(session)
                existing = await orders.get_by_order_id(placement.external_order_id)
                if existing is None:
                    await orders.create_order(
                        order_id=placement.external_order_id,
                        user_id=placement.user_id,
                        service_id=placement.service_id,
                        link=placement.link,
                        quantity=placement.quantity,
                        charge=placement.charge,
                        status=OrderStatus.PENDING.value,
                    )
                    report.recovered += 1
                else:
                    report.already_present += 1
                await placements_repo.update_status(placement.id, status=PlacementStatus.RECORDED.value)
            logger.info("Recovered order %s from placement %s", placement.external_order_id, placement.id)

        if report.stuck_submitting:
            logger.warning("%s placement(s) stuck in submitting need manual review", report.stuck_submitting)
        return report

    async def _find_service(self, provider_service_id: int) -> ServiceOffer | None:
        async with self._session_factory() as session:
            return await CatalogService.with_session(session).find_active_service(provider_service_id)

    async def _create_placement(
        self, user_id: str, service: ServiceOffer, link: str, quantity: int, charge: Decimal
    ) -> str:
        async with self._session_factory() as session, session.begin():
            placement = await self._placement_repository_factory(session).create(
                user_id=user_id,
                service_id=service.id,
                provider_service_id=service.provider_service_id,
                link=link,
                quantity=quantity,
                charge=charge,
            )
            return placement.id

    async def _submit(
        self,
        placement_id: str,
        user_id: str,
        service: ServiceOffer,
        link: str,
        quantity: int,
        charge: Decimal,
    ) -> int:
        # Cancellation is not an Exception: the request may already be with the
        # provider, so the charge stays reserved and the placement stays
        # ``submitting`` for manual review.
        try:
            result = await self._client.add_order(service.provider_service_id, link, quantity)
        except Exception as exc:
            logger.warning("Provider call raised for placement %s", placement_id, exc_info=True)
            error_message = f"{type(exc).__name__}: {exc}"
        else:
            if not isinstance(result, ProviderError):
                return result.value
            logger.warning("Provider rejected placement %s: %s", placement_id, result.message)
            error_message = result.message

        await self._wallet.refund(user_id, charge, description="Order placement failed")
        logger.info("Refunded %s to user %s after failed placement %s", charge, user_id, placement_id)
        await self._mark_placement(placement_id, PlacementStatus.FAILED, error_message=error_message)
        raise OrderPlacementError("failed to place order")

    async def _record(
        self,
        placement_id: str,
        external_id: int,
        user_id: str,
        service_id: str,
        link: str,
        quantity: int,
        charge: Decimal,
    ) -> Order:
        async with self._session_factory() as session, session.begin():
            model = await self._order_repository_factory(session).create_order(
                order_id=external_id,
                user_id=user_id,
                service_id=service_id,
                link=link,
                quantity=quantity,
                charge=charge,
                status=OrderStatus.PENDING.value,
            )
            await self._placement_repository_factory(session).update_status(
                placement_id,
                status=PlacementStatus.RECORDED.value,
                external_order_id=external_id,
            )
            return order_from_model(model)

    async def _mark_placement(
        self,
        placement_id: str,
        status: PlacementStatus,
        *,
        external_order_id: int | None = None,
        error_message: str | None = None,
    ) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                await self._placement_repository_factory(session).update_status(
                    placement_id,
                    status=status.value,
                    external_order_id=external_order_id,
                    error_message=error_message,
                )
        except Exception:
            logger.exception("Failed to mark placement %s as %s", placement_id, status.value)

    async def _record_activity(self, user_id: str) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                await ActivityService.with_session(session).record(user_id, PLACED_ORDER_ACTIVITY)
        except Exception:
            logger.warning("Failed to record activity for user %s", user_id, exc_info=True)
