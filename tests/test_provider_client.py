import asyncio
from decimal import Decimal

import httpx
import pytest

from smm_broker.core.config import ProviderSettings
from smm_broker.infrastructure.provider import FulfillmentClient, ProviderError, ProviderOk

API_URL = "https://panel.example.com/api/v2"


def _client(handler, api_key: str = "secret-key") -> FulfillmentClient:
    return FulfillmentClient(API_URL, api_key, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_add_order_sends_query_parameters_and_returns_order_id():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        seen["method"] = request.method
        return httpx.Response(200, json={"order": 23501})

    client = _client(handler)
    result = await client.add_order(1001, "https://instagram.com/p/abc", 50)
    await client.aclose()

    assert result == ProviderOk(23501)
    assert seen == {
        "method": "POST",
        "key": "secret-key",
        "action": "add",
        "service": "1001",
        "link": "https://instagram.com/p/abc",
        "quantity": "50",
    }


@pytest.mark.asyncio
async def test_error_payload_becomes_error_result():
    client = _client(lambda request: httpx.Response(200, json={"error": "Not enough funds on balance"}))

    result = await client.add_order(1001, "https://instagram.com/p/abc", 50)

    assert isinstance(result, ProviderError)
    assert result.message == "Not enough funds on balance"
    assert result.ok is False


@pytest.mark.asyncio
async def test_non_200_response_is_an_error_result():
    client = _client(lambda request: httpx.Response(503, text="maintenance"))

    result = await client.add_order(1001, "https://instagram.com/p/abc", 50)

    assert result == ProviderError("unexpected status 503")


@pytest.mark.asyncio
async def test_malformed_json_is_an_error_result():
    client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    result = await client.get_balance()

    assert result == ProviderError("malformed response: invalid json")


@pytest.mark.asyncio
async def test_missing_order_field_is_an_error_result():
    client = _client(lambda request: httpx.Response(200, json={"status": "ok"}))

    result = await client.add_order(1001, "https://instagram.com/p/abc", 50)

    assert isinstance(result, ProviderError)


@pytest.mark.asyncio
async def test_timeout_is_an_error_result():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    result = await _client(handler).add_order(1001, "https://instagram.com/p/abc", 50)

    assert result == ProviderError("timeout")


@pytest.mark.asyncio
async def test_network_failure_is_an_error_result():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await _client(handler).get_balance()

    assert result == ProviderError("request failed: ConnectError")


@pytest.mark.asyncio
async def test_missing_api_key_short_circuits():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"order": 1})

    result = await _client(handler, api_key="").add_order(1001, "https://instagram.com/p/abc", 50)

    assert result == ProviderError("provider api key is not configured")
    assert calls == []


@pytest.mark.asyncio
async def test_bulk_status_maps_each_entry_independently():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(
            200,
            json={
                "101": {"charge": "0.27819", "start_count": "3572", "status": "Partial", "remains": "157", "currency": "USD"},
                "102": {"error": "Incorrect order ID"},
                "103": {"charge": "1.44219", "start_count": "234", "status": "In progress", "remains": "10"},
            },
        )

    result = await _client(handler).get_bulk_status([101, 102, 103])

    assert seen["action"] == "status"
    assert seen["orders"] == "101,102,103"
    assert isinstance(result, ProviderOk)
    statuses = result.value
    assert statuses[101].value.status == "Partial"
    assert statuses[101].value.remains == "157"
    assert statuses[102] == ProviderError("Incorrect order ID")
    assert statuses[103].value.currency is None


@pytest.mark.asyncio
async def test_bulk_status_refuses_oversized_batches():
    client = _client(lambda request: httpx.Response(200, json={}))

    with pytest.raises(ValueError):
        await client.get_bulk_status(list(range(101)))


@pytest.mark.asyncio
async def test_bulk_status_with_no_ids_makes_no_request():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    result = await _client(handler).get_bulk_status([])

    assert result == ProviderOk({})
    assert calls == []


@pytest.mark.asyncio
async def test_balance_is_parsed_as_decimal():
    client = _client(lambda request: httpx.Response(200, json={"balance": "100.84292", "currency": "USD"}))

    result = await client.get_balance()

    assert result.value.balance == Decimal("100.84292")
    assert result.value.currency == "USD"


@pytest.mark.asyncio
async def test_services_skip_malformed_entries():
    payload = [
        {"service": 1, "name": "Followers", "type": "Default", "category": "Instagram", "rate": "0.90", "min": "50", "max": "10000", "refill": True, "cancel": True},
        {"service": "oops", "name": "Broken"},
    ]
    client = _client(lambda request: httpx.Response(200, json=payload))

    result = await client.get_services()

    assert [item.service for item in result.value] == [1]
    assert result.value[0].refill is True


def test_client_from_settings_uses_configured_values():
    settings = ProviderSettings(api_url=API_URL, api_key="k", timeout_seconds=2.5, batch_size=50)

    client = FulfillmentClient.from_settings(settings)

    assert client.max_batch_size == 50


@pytest.mark.asyncio
async def test_single_status_returns_report():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json={"charge": "0.27819", "start_count": "3572", "status": "Partial", "remains": "157"})

    result = await _client(handler).get_status(23501)

    assert seen["order"] == "23501"
    assert result.value.status == "Partial"
    assert result.value.start_count == "3572"


@pytest.mark.asyncio
async def test_slow_response_is_bounded_by_total_timeout():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1)
        return httpx.Response(200, json={"order": 1})

    client = FulfillmentClient(API_URL, "secret-key", timeout=0.05, transport=httpx.MockTransport(handler))

    result = await client.add_order(1001, "https://instagram.com/p/abc", 50)
    await client.aclose()

    assert result == ProviderError("timeout")
