"""HTTP client for the upstream fulfillment provider (SMM panel API v2).

Every call resolves to either ``ProviderOk`` or ``ProviderError``; network
faults, timeouts, non-200 replies and malformed payloads never raise out of
the client. Batching is left to callers: one invocation is one request.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Sequence

import httpx

from smm_broker.core.config import ProviderSettings

from .types import (
    OrderStatusReport,
    ProviderBalance,
    ProviderError,
    ProviderOk,
    ProviderResult,
    ProviderService,
)

logger = logging.getLogger(__name__)

MAX_BULK_STATUS_IDS = 100


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


class FulfillmentClient:
    def __init__(
        self,
        api_url: str,
        api_key: str,
        *,
        timeout: float = 5.0,
        max_batch_size: int = MAX_BULK_STATUS_IDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url
        self._api_key = api_key
        self.timeout = timeout
        self.max_batch_size = max_batch_size
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_settings(
        cls,
        settings: ProviderSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "FulfillmentClient":
        return cls(
            settings.api_url,
            settings.api_key.get_secret_value(),
            timeout=settings.timeout_seconds,
            max_batch_size=settings.batch_size,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def add_order(self, service: int, link: str, quantity: int) -> ProviderResult[int]:
        result = await self._request("add", service=service, link=link, quantity=quantity)
        if isinstance(result, ProviderError):
            return result
        payload = result.value
        if not isinstance(payload, Mapping) or "order" not in payload:
            return ProviderError("malformed response: missing order id")
        try:
            return ProviderOk(int(payload["order"]))
        except (TypeError, ValueError):
            return ProviderError(f"malformed response: invalid order id {payload['order']!r}")

    async def get_status(self, order_id: int) -> ProviderResult[OrderStatusReport]:
        result = await self._request("status", order=order_id)
        if isinstance(result, ProviderError):
            return result
        return self._parse_status_entry(result.value)

    async def get_bulk_status(
        self, order_ids: Sequence[int]
    ) -> ProviderResult[dict[int, ProviderResult[OrderStatusReport]]]:
        if len(order_ids) > self.max_batch_size:
            raise ValueError(f"at most {self.max_batch_size} order ids per status call, got {len(order_ids)}")
        if not order_ids:
            return ProviderOk({})

        result = await self._request("status", orders=",".join(str(order_id) for order_id in order_ids))
        if isinstance(result, ProviderError):
            return result
        payload = result.value
        if not isinstance(payload, Mapping):
            return ProviderError("malformed response: expected an object keyed by order id")

        statuses: dict[int, ProviderResult[OrderStatusReport]] = {}
        for key, entry in payload.items():
            try:
                order_id = int(key)
            except (TypeError, ValueError):
                logger.warning("Ignoring unexpected key %r in bulk status response", key)
                continue
            statuses[order_id] = self._parse_status_entry(entry)
        return ProviderOk(statuses)

    async def get_balance(self) -> ProviderResult[ProviderBalance]:
        result = await self._request("balance")
        if isinstance(result, ProviderError):
            return result
        payload = result.value
        if not isinstance(payload, Mapping) or "balance" not in payload:
            return ProviderError("malformed response: missing balance")
        try:
            balance = Decimal(str(payload["balance"]))
        except InvalidOperation:
            return ProviderError(f"malformed response: invalid balance {payload['balance']!r}")
        return ProviderOk(ProviderBalance(balance=balance, currency=str(payload.get("currency") or "")))

    async def get_services(self) -> ProviderResult[list[ProviderService]]:
        result = await self._request("services")
        if isinstance(result, ProviderError):
            return result
        payload = result.value
        if not isinstance(payload, list):
            return ProviderError("malformed response: expected a list of services")

        services: list[ProviderService] = []
        for item in payload:
            try:
                services.append(
                    ProviderService(
                        service=int(item["service"]),
                        name=str(item["name"]),
                        type=str(item.get("type") or "Default"),
                        category=str(item.get("category") or ""),
                        rate=str(item["rate"]),
                        min=str(item["min"]),
                        max=str(item["max"]),
                        refill=_as_bool(item.get("refill", False)),
                        cancel=_as_bool(item.get("cancel", False)),
                    )
                )
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning("Skipping malformed service entry: %r", item)
        return ProviderOk(services)

    async def _request(self, action: str, **params: Any) -> ProviderResult[Any]:
        if not self._api_key:
            return ProviderError("provider api key is not configured")

        query = {"key": self._api_key, "action": action, **params}
        try:
            # httpx limits each phase separately; this bounds the whole call.
            response = await asyncio.wait_for(
                self._client.post(self._api_url, params=query), timeout=self.timeout
            )
        except (httpx.TimeoutException, asyncio.TimeoutError):
            return ProviderError("timeout")
        except httpx.HTTPError as exc:
            return ProviderError(f"request failed: {exc.__class__.__name__}")

        if response.status_code != 200:
            return ProviderError(f"unexpected status {response.status_code}")
        try:
            payload = response.json()
        except ValueError:
            return ProviderError("malformed response: invalid json")

        if isinstance(payload, Mapping) and "error" in payload:
            return ProviderError(str(payload["error"]))
        return ProviderOk(payload)

    @staticmethod
    def _parse_status_entry(entry: Any) -> ProviderResult[OrderStatusReport]:
        if not isinstance(entry, Mapping):
            return ProviderError("malformed status entry")
        if "error" in entry:
            return ProviderError(str(entry["error"]))
        status = entry.get("status")
        if not isinstance(status, str) or not status:
            return ProviderError("malformed status entry: missing status")
        return ProviderOk(
            OrderStatusReport(
                status=status,
                start_count=_optional_str(entry.get("start_count")),
                remains=_optional_str(entry.get("remains")),
                charge=_optional_str(entry.get("charge")),
                currency=_optional_str(entry.get("currency")),
            )
        )
