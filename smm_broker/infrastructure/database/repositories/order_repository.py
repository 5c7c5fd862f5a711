"""SQLAlchemy implementation for orders and placement records"""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from sqlalchemy import desc, func, select, update

from smm_broker.db.models import Order, OrderPlacement
from smm_broker.domain.common import AsyncRepository


class SqlOrderRepository(AsyncRepository[Order]):
    async def create_order(
        self,
        *,
        order_id: int,
        user_id: str,
        service_id: str,
        link: str,
        quantity: int,
        charge: Decimal,
        status: str,
    ) -> Order:
        order = await self.add(
            Order(
                order_id=order_id,
                user_id=user_id,
                service_id=service_id,
                link=link,
                quantity=quantity,
                charge=charge,
                start_count=0,
                remains=quantity,
                status=status,
            )
        )
        await self.session.refresh(order)
        return order

    async def get_by_order_id(self, order_id: int) -> Order | None:
        stmt = select(Order).where(Order.order_id == order_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_open_orders(self, statuses: Sequence[str]) -> Sequence[tuple[int, str]]:
        stmt = select(Order.order_id, Order.status).where(Order.status.in_(list(statuses)))
        result = await self.session.execute(stmt)
        return [(int(order_id), status) for order_id, status in result.all()]

    async def update_progress(
        self,
        order_id: int,
        *,
        status: str,
        start_count: int,
        remains: int,
        terminal_statuses: Sequence[str],
    ) -> bool:
        stmt = (
            update(Order)
            .where(Order.order_id == order_id, Order.status.not_in(list(terminal_statuses)))
            .values(status=status, start_count=start_count, remains=remains, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def list_orders(
        self,
        user_id: str,
        *,
        status: str | None,
        order_id: int | None,
        link_contains: str | None,
        limit: int,
        offset: int,
    ) -> Sequence[Order]:
        stmt = select(Order).where(Order.user_id == user_id)
        if status:
            stmt = stmt.where(Order.status == status)
        if order_id is not None:
            stmt = stmt.where(Order.order_id == order_id)
        if link_contains:
            stmt = stmt.where(Order.link.icontains(link_contains, autoescape=True))
        stmt = stmt.order_by(desc(Order.created_at), desc(Order.order_id)).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_orders(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(Order).where(Order.user_id == user_id)
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)

    async def summarize_status(self, user_id: str, status: str) -> tuple[int, Decimal]:
        stmt = select(func.count(), func.coalesce(func.sum(Order.charge), 0)).where(
            Order.user_id == user_id,
            Order.status == status,
        )
        count, total = (await self.session.execute(stmt)).one()
        return int(count or 0), Decimal(str(total or 0))


class SqlPlacementRepository(AsyncRepository[OrderPlacement]):
    async def create(
        self,
        *,
        user_id: str,
        service_id: str,
        provider_service_id: int,
        link: str,
        quantity: int,
        charge: Decimal,
    ) -> OrderPlacement:
        placement = await self.add(
            OrderPlacement(
                user_id=user_id,
                service_id=service_id,
                provider_service_id=provider_service_id,
                link=link,
                quantity=quantity,
                charge=charge,
                status="submitting",
            )
        )
        await self.session.refresh(placement)
        return placement

    async def update_status(
        self,
        placement_id: str,
        *,
        status: str,
        external_order_id: int | None = None,
        error_message: str | None = None,
    ) -> None:
        values: dict = {"status": status, "updated_at": func.now()}
        if external_order_id is not None:
            values["external_order_id"] = external_order_id
        if error_message is not None:
            values["error_message"] = error_message
        stmt = (
            update(OrderPlacement)
            .where(OrderPlacement.id == placement_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def list_by_status(self, status: str, limit: int) -> Sequence[OrderPlacement]:
        stmt = (
            select(OrderPlacement)
            .where(OrderPlacement.status == status)
            .order_by(OrderPlacement.created_at)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
