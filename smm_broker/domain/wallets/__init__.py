"""Wallet domain exports"""

from .exceptions import ConcurrentWalletUpdateError, InvalidAmountError, TopupRejectedError, WalletError
from .levels import calculate_account_level
from .models import (
    CreditResult,
    FundsTransactionRecord,
    PaymentMethod,
    TransactionStatus,
    TransactionType,
    WalletSnapshot,
)
from .service import WalletService

__all__ = [
    "ConcurrentWalletUpdateError",
    "CreditResult",
    "FundsTransactionRecord",
    "InvalidAmountError",
    "PaymentMethod",
    "TopupRejectedError",
    "TransactionStatus",
    "TransactionType",
    "WalletError",
    "WalletService",
    "WalletSnapshot",
    "calculate_account_level",
]
