"""Wallet domain specific exceptions."""


class WalletError(Exception):
    """Base class for wallet domain errors."""


class InvalidAmountError(WalletError):
    """Raised when a mutation amount is not a positive number."""


class TopupRejectedError(WalletError):
    """Raised when a top-up cannot be applied (unconfirmed payment, reused reference)."""


class ConcurrentWalletUpdateError(WalletError):
    """Raised when a wallet keeps changing underneath a mutation."""
