"""Read-side order use cases."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from smm_broker.domain.wallets import WalletService
from smm_broker.infrastructure.database.repositories.order_repository import SqlOrderRepository

from .models import AccountStatus, Order, OrderStatus
from .placement import order_from_model
from .repository import OrderRepository

MAX_PAGE_SIZE = 100


@dataclass(slots=True)
class OrderService:
    repository: OrderRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "OrderService":
        return cls(SqlOrderRepository(session))

    async def list_orders(
        self,
        user_id: str,
        *,
        status: OrderStatus | str | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Order]:
        """Newest first. A numeric ``search`` matches the order id, anything else the link."""
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        offset = max(0, offset)
        status_value = OrderStatus(status).value if status else None

        order_id = None
        link_contains = None
        term = (search or "").strip()
        if term.isdigit():
            order_id = int(term)
        elif term:
            link_contains = term

        rows = await self.repository.list_orders(
            user_id,
            status=status_value,
            order_id=order_id,
            link_contains=link_contains,
            limit=limit,
            offset=offset,
        )
        return [order_from_model(row) for row in rows]

    async def get_order(self, order_id: int) -> Order | None:
        model = await self.repository.get_by_order_id(order_id)
        return order_from_model(model) if model else None

    async def account_status(self, user_id: str, wallet: WalletService) -> AccountStatus:
        total_orders = await self.repository.count_orders(user_id)
        completed_orders, completed_amount = await self.repository.summarize_status(
            user_id, OrderStatus.COMPLETED.value
        )
        snapshot = await wallet.sync_total_spent(user_id, completed_amount)
        return AccountStatus(
            user_id=user_id,
            account_level=snapshot.account_level,
            balance=snapshot.balance,
            total_orders=total_orders,
            completed_orders=completed_orders,
            completed_amount=completed_amount,
        )
