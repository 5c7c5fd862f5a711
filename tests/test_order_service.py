from decimal import Decimal

import pytest

from smm_broker.domain.orders import OrderStatus
from smm_broker.domain.orders.service import OrderService

from tests.helpers import fund, insert_orders


@pytest.mark.asyncio
async def test_list_orders_filters_by_status_and_search(session_factory, user, service):
    await insert_orders(session_factory, user.id, service, [1001, 1002])
    await insert_orders(session_factory, user.id, service, [2001], status="Completed")

    async with session_factory() as session:
        orders = OrderService.with_session(session)
        everything = await orders.list_orders(user.id)
        completed = await orders.list_orders(user.id, status=OrderStatus.COMPLETED)
        by_id = await orders.list_orders(user.id, search="1002")
        by_link = await orders.list_orders(user.id, search="INSTAGRAM.com/p/200")

    assert {order.order_id for order in everything} == {1001, 1002, 2001}
    assert [order.order_id for order in completed] == [2001]
    assert [order.order_id for order in by_id] == [1002]
    assert [order.order_id for order in by_link] == [2001]


@pytest.mark.asyncio
async def test_list_orders_clamps_page_size(session_factory, user, service):
    await insert_orders(session_factory, user.id, service, range(1, 121))

    async with session_factory() as session:
        orders = OrderService.with_session(session)
        capped = await orders.list_orders(user.id, limit=500)
        minimum = await orders.list_orders(user.id, limit=0)

    assert len(capped) == 100
    assert len(minimum) == 1


@pytest.mark.asyncio
async def test_get_order_by_external_id(session_factory, user, service):
    await insert_orders(session_factory, user.id, service, [4242])

    async with session_factory() as session:
        orders = OrderService.with_session(session)
        found = await orders.get_order(4242)
        missing = await orders.get_order(1)

    assert found.status is OrderStatus.PENDING
    assert found.charge == Decimal("200.00")
    assert missing is None


@pytest.mark.asyncio
async def test_account_status_syncs_total_spent_and_level(session_factory, wallet, user, service):
    await fund(wallet, user.id, "750")
    await insert_orders(session_factory, user.id, service, range(1, 131), status="Completed")
    await insert_orders(session_factory, user.id, service, [500])

    async with session_factory() as session:
        status = await OrderService.with_session(session).account_status(user.id, wallet)

    assert status.total_orders == 131
    assert status.completed_orders == 130
    assert status.completed_amount == Decimal("26000")
    assert status.account_level == 2
    assert status.balance == Decimal("750")
    assert (await wallet.ensure_wallet(user.id)).total_spent == Decimal("26000")
