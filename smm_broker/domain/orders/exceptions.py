"""Order domain specific exceptions."""


class OrderError(Exception):
    """Base class for order domain errors."""


class OrderValidationError(OrderError):
    """Raised when a placement request is rejected before any side effect."""


class ServiceUnavailableError(OrderValidationError):
    """Raised when the requested service does not exist or is inactive."""


class InsufficientFundsError(OrderError):
    """Raised when the wallet cannot cover the order charge."""


class OrderPlacementError(OrderError):
    """Raised when the provider did not accept the order; the charge has been refunded."""


class OrderPersistenceError(OrderError):
    """Raised when the provider accepted the order but it could not be stored locally."""

    def __init__(self, message: str, *, external_order_id: int | None = None) -> None:
        super().__init__(message)
        self.external_order_id = external_order_id
