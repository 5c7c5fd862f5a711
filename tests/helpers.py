from decimal import Decimal

from sqlalchemy import func, select

from smm_broker.db import models
from smm_broker.domain.wallets import PaymentMethod, WalletService
from smm_broker.infrastructure.provider import OrderStatusReport, ProviderError, ProviderOk


async def fund(wallet: WalletService, user_id: str, amount: str, reference: str = "seed-topup") -> None:
    await wallet.credit(
        user_id,
        Decimal(amount),
        method=PaymentMethod.FLUTTERWAVE,
        external_reference=reference,
        status="successful",
    )


async def insert_orders(session_factory, user_id: str, service_id: str, order_ids, status: str = "Pending") -> None:
    async with session_factory() as session, session.begin():
        session.add_all(
            [
                models.Order(
                    order_id=order_id,
                    user_id=user_id,
                    service_id=service_id,
                    link=f"https://instagram.com/p/{order_id}",
                    quantity=100,
                    charge=Decimal("200.00"),
                    start_count=0,
                    remains=100,
                    status=status,
                )
                for order_id in order_ids
            ]
        )


async def load_order(session_factory, order_id: int) -> models.Order | None:
    async with session_factory() as session:
        result = await session.execute(select(models.Order).where(models.Order.order_id == order_id))
        return result.scalars().first()


async def count_rows(session_factory, model) -> int:
    async with session_factory() as session:
        return int(await session.scalar(select(func.count()).select_from(model)))


def status_entry(status: str, start_count: str | None = "0", remains: str | None = "100") -> ProviderOk:
    return ProviderOk(
        OrderStatusReport(status=status, start_count=start_count, remains=remains, charge="2.00", currency="USD")
    )


class FakeProvider:
    """Stands in for ``FulfillmentClient`` with scripted answers."""

    def __init__(self) -> None:
        self.add_order_result = ProviderOk(555001)
        self.add_order_exception: Exception | None = None
        self.add_order_calls: list[tuple[int, str, int]] = []
        self.statuses: dict[int, object] = {}
        self.status_calls: list[list[int]] = []
        self.failing_status_calls: set[int] = set()
        self.batch_error: ProviderError | None = None
        self.services = ProviderOk([])

    async def add_order(self, service: int, link: str, quantity: int):
        self.add_order_calls.append((service, link, quantity))
        if self.add_order_exception is not None:
            raise self.add_order_exception
        return self.add_order_result

    async def get_bulk_status(self, order_ids):
        call_index = len(self.status_calls)
        self.status_calls.append(list(order_ids))
        if call_index in self.failing_status_calls:
            raise ConnectionError("provider unreachable")
        if self.batch_error is not None:
            return self.batch_error
        return ProviderOk(
            {order_id: self.statuses.get(order_id, status_entry("Pending")) for order_id in order_ids}
        )

    async def get_services(self):
        return self.services

    async def aclose(self) -> None:
        return None
