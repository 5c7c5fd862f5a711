"""Order aggregate, placement and status reconciliation.

Services live in their submodules (``service``, ``placement``, ``monitor``)
because they depend on the other domains.
"""

from .exceptions import (
    InsufficientFundsError,
    OrderError,
    OrderPersistenceError,
    OrderPlacementError,
    OrderValidationError,
    ServiceUnavailableError,
)
from .models import (
    OPEN_STATUSES,
    TERMINAL_STATUSES,
    AccountStatus,
    Order,
    OrderStatus,
    Placement,
    PlacementStatus,
    RecoveryReport,
    can_transition,
    parse_count,
)

__all__ = [
    "OPEN_STATUSES",
    "TERMINAL_STATUSES",
    "AccountStatus",
    "InsufficientFundsError",
    "Order",
    "OrderError",
    "OrderPersistenceError",
    "OrderPlacementError",
    "OrderStatus",
    "OrderValidationError",
    "Placement",
    "PlacementStatus",
    "RecoveryReport",
    "ServiceUnavailableError",
    "can_transition",
    "parse_count",
]
