"""Repository protocols for orders and placement records."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, Sequence

from smm_broker.db.models import Order as OrderModel, OrderPlacement as PlacementModel


class OrderRepository(Protocol):
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
    ) -> OrderModel:
        ...

    async def get_by_order_id(self, order_id: int) -> OrderModel | None:
        ...

    async def list_open_orders(self, statuses: Sequence[str]) -> Sequence[tuple[int, str]]:
        ...

    async def update_progress(
        self,
        order_id: int,
        *,
        status: str,
        start_count: int,
        remains: int,
        terminal_statuses: Sequence[str],
    ) -> bool:
        ...

    async def list_orders(
        self,
        user_id: str,
        *,
        status: str | None,
        order_id: int | None,
        link_contains: str | None,
        limit: int,
        offset: int,
    ) -> Sequence[OrderModel]:
        ...

    async def count_orders(self, user_id: str) -> int:
        ...

    async def summarize_status(self, user_id: str, status: str) -> tuple[int, Decimal]:
        ...


class PlacementRepository(Protocol):
    async def create(
        self,
        *,
        user_id: str,
        service_id: str,
        provider_service_id: int,
        link: str,
        quantity: int,
        charge: Decimal,
    ) -> PlacementModel:
        ...

    async def update_status(
        self,
        placement_id: str,
        *,
        status: str,
        external_order_id: int | None = None,
        error_message: str | None = None,
    ) -> None:
        ...

    async def list_by_status(self, status: str, limit: int) -> Sequence[PlacementModel]:
        ...
