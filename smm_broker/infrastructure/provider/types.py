"""Result and payload types returned by the fulfillment provider client."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ProviderOk(Generic[T]):
    value: T
    ok: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class ProviderError:
    message: str
    ok: ClassVar[bool] = False


ProviderResult = Union[ProviderOk[T], ProviderError]


@dataclass(frozen=True, slots=True)
class OrderStatusReport:
    """One entry of a bulk status response, values exactly as the provider sent them."""

    status: str
    start_count: Optional[str]
    remains: Optional[str]
    charge: Optional[str]
    currency: Optional[str]


@dataclass(frozen=True, slots=True)
class ProviderBalance:
    balance: Decimal
    currency: str


@dataclass(frozen=True, slots=True)
class ProviderService:
    service: int
    name: str
    type: str
    category: str
    rate: str
    min: str
    max: str
    refill: bool = False
    cancel: bool = False
