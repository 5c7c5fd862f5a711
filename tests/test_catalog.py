from decimal import Decimal

import pytest

from smm_broker.domain.catalog import CatalogService, apply_markup
from smm_broker.infrastructure.provider import ProviderError, ProviderOk, ProviderService


def _offer(service_id: int, rate: str = "1.00") -> ProviderService:
    return ProviderService(
        service=service_id,
        name=f"Service {service_id}",
        type="Default",
        category="Instagram",
        rate=rate,
        min="10",
        max="5000",
    )


@pytest.mark.parametrize(
    ("rate", "markup", "expected"),
    [("2.00", Decimal("0.10"), "2.2"), ("0.9", Decimal("0.25"), "1.125"), ("10", Decimal("0"), "10")],
)
def test_apply_markup(rate, markup, expected):
    assert apply_markup(rate, markup) == expected


@pytest.mark.asyncio
async def test_sync_upserts_with_markup_and_deactivates_missing(session_factory, service, provider):
    provider.services = ProviderOk([_offer(2002, "0.50"), _offer(3003, "oops")])

    async with session_factory() as session, session.begin():
        report = await CatalogService.with_session(session).sync_from_provider(provider, markup=Decimal("0.10"))

    assert report.ok
    assert report.upserted == 1
    assert report.deactivated == 1
    assert report.skipped == [3003]

    async with session_factory() as session:
        catalog = CatalogService.with_session(session)
        assert await catalog.find_active_service(1001) is None
        synced = await catalog.find_active_service(2002)
        inactive = await catalog.get_service(service)
        listed = await catalog.list_services()

    assert synced.rate == Decimal("0.55")
    assert synced.min_quantity == 10
    assert synced.max_quantity == 5000
    assert synced.last_synced_at is not None
    assert inactive.is_active is False
    assert [offer.provider_service_id for offer in listed] == [2002]


@pytest.mark.asyncio
async def test_resync_updates_existing_service_in_place(session_factory, service, provider):
    provider.services = ProviderOk([_offer(1001, "3.00")])

    async with session_factory() as session, session.begin():
        await CatalogService.with_session(session).sync_from_provider(provider, markup=Decimal("0"))

    async with session_factory() as session:
        offer = await CatalogService.with_session(session).find_active_service(1001)

    assert offer.id == service
    assert offer.rate == Decimal("3")
    assert offer.name == "Service 1001"


@pytest.mark.asyncio
async def test_provider_error_leaves_catalog_untouched(session_factory, service, provider):
    provider.services = ProviderError("Invalid API key")

    async with session_factory() as session, session.begin():
        report = await CatalogService.with_session(session).sync_from_provider(provider, markup=Decimal("0.10"))

    assert report.ok is False
    assert report.error == "Invalid API key"
    async with session_factory() as session:
        offer = await CatalogService.with_session(session).find_active_service(1001)
    assert offer.rate == Decimal("2.00")


@pytest.mark.asyncio
async def test_non_numeric_quantity_bounds_parse_as_zero(session_factory, provider):
    offer = ProviderService(
        service=4004, name="Odd", type="Default", category="Misc", rate="1", min="Infinity", max="NaN"
    )
    provider.services = ProviderOk([offer])

    async with session_factory() as session, session.begin():
        await CatalogService.with_session(session).sync_from_provider(provider, markup=Decimal("0"))

    async with session_factory() as session:
        stored = await CatalogService.with_session(session).find_active_service(4004)

    assert stored.min_quantity == 0
    assert stored.max_quantity == 0
