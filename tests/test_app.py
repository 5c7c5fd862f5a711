from decimal import Decimal

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from smm_broker.core.config import Settings
from smm_broker.core.container import build_container
from smm_broker.db import models
from smm_broker.main import create_app

from tests.helpers import load_order


def _settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        database={"url": f"sqlite+aiosqlite:///{tmp_path / 'app.db'}"},
        provider={"api_url": "https://panel.example.com/api/v2", "api_key": "test-key"},
        jobs={"enabled": False},
    )


def _provider_handler(request: httpx.Request) -> httpx.Response:
    params = request.url.params
    if params["action"] == "status":
        return httpx.Response(
            200,
            json={
                order_id: {"status": "Completed", "start_count": "120", "remains": "0"}
                for order_id in params["orders"].split(",")
            },
        )
    return httpx.Response(200, json={"error": "Incorrect request"})


@pytest.mark.asyncio
async def test_health_reports_environment_and_working_set(tmp_path):
    container = build_container(_settings(tmp_path), transport=httpx.MockTransport(_provider_handler))
    app = create_app(container)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")

    await container.aclose()
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["environment"] == "test"
    assert body["pending_orders"] == 0
    assert body["last_tick"] is None


@pytest.mark.asyncio
async def test_lifespan_wires_monitor_to_storage_and_provider(tmp_path):
    container = build_container(_settings(tmp_path), transport=httpx.MockTransport(_provider_handler))
    app = create_app(container)

    async with app.router.lifespan_context(app):
        async with container.session_factory() as session, session.begin():
            user = models.User(first_name="Ada", last_name="Obi")
            service = models.Service(
                provider_service_id=1001,
                name="Followers",
                type="Default",
                category="Instagram",
                rate="2.00",
                min="10",
                max="1000",
            )
            session.add_all([user, service])
            await session.flush()
            session.add(
                models.Order(
                    order_id=880001,
                    user_id=user.id,
                    service_id=service.id,
                    link="https://instagram.com/p/xyz",
                    quantity=100,
                    charge=Decimal("200"),
                    status="Processing",
                )
            )

        report = await container.monitor.run_tick()

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            body = (await client.get("/health")).json()

        stored = await load_order(container.session_factory, 880001)

    assert report.settled == 1
    assert stored.status == "Completed"
    assert stored.start_count == 120
    assert body["pending_orders"] == 0
    assert body["last_tick"]["settled"] == 1
