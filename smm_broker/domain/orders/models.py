"""Order aggregate and its status machine."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    IN_PROGRESS = "In progress"
    PARTIAL = "Partial"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"

    @classmethod
    def from_provider(cls, value: str) -> Optional["OrderStatus"]:
        """Map a provider status string, or None when it is not recognised."""
        return _PROVIDER_ALIASES.get(value.strip().lower().replace("_", " "))

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


_PROVIDER_ALIASES = {
    "pending": OrderStatus.PENDING,
    "processing": OrderStatus.PROCESSING,
    "in progress": OrderStatus.IN_PROGRESS,
    "inprogress": OrderStatus.IN_PROGRESS,
    "partial": OrderStatus.PARTIAL,
    "completed": OrderStatus.COMPLETED,
    "canceled": OrderStatus.CANCELLED,
    "cancelled": OrderStatus.CANCELLED,
    "refunded": OrderStatus.REFUNDED,
}

TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.REFUNDED})
OPEN_STATUSES = frozenset(status for status in OrderStatus if status not in TERMINAL_STATUSES)

# PENDING -> in-flight -> terminal; moves among in-flight states are lateral.
_STAGE = {
    OrderStatus.PENDING: 0,
    OrderStatus.PROCESSING: 1,
    OrderStatus.IN_PROGRESS: 1,
    OrderStatus.PARTIAL: 1,
    OrderStatus.COMPLETED: 2,
    OrderStatus.CANCELLED: 2,
    OrderStatus.REFUNDED: 2,
}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    if current is new or current.is_terminal:
        return False
    return _STAGE[new] >= _STAGE[current]


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_count(value: Any) -> int:
    """Leading-integer parse of a provider count; 0 when there is none."""
    if value is None:
        return 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


class PlacementStatus(str, Enum):
    SUBMITTING = "submitting"
    FAILED = "failed"
    RECORDED = "recorded"
    UNRECORDED = "unrecorded"


@dataclass(slots=True)
class Order:
    id: str
    order_id: int
    user_id: str
    service_id: str
    link: str
    quantity: int
    charge: Decimal
    start_count: int
    remains: int
    status: OrderStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass(slots=True)
class Placement:
    id: str
    user_id: str
    service_id: str
    provider_service_id: int
    link: str
    quantity: int
    charge: Decimal
    status: PlacementStatus
    external_order_id: Optional[int] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class AccountStatus:
    user_id: str
    account_level: int
    balance: Decimal
    total_orders: int
    completed_orders: int
    completed_amount: Decimal


@dataclass(slots=True)
class RecoveryReport:
    recovered: int = 0
    already_present: int = 0
    stuck_submitting: int = 0
