"""Domain models for wallet operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    SUCCESSFUL = "successful"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    FLUTTERWAVE = "FlutterWave"
    PAYSTACK = "Paystack"
    BANK_TRANSFER = "Bank Transfer"
    SYSTEM = "System"


@dataclass(slots=True)
class WalletSnapshot:
    user_id: str
    balance: Decimal
    total_spent: Decimal
    account_level: int
    currency: str
    version: int
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class FundsTransactionRecord:
    transaction_id: int
    user_id: str
    type: TransactionType
    status: TransactionStatus
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    payment_method: str
    reference: Optional[str]
    description: Optional[str]
    created_at: Optional[datetime]


@dataclass(slots=True)
class CreditResult:
    applied: bool
    balance: Decimal
    transaction: FundsTransactionRecord

    @property
    def duplicate(self) -> bool:
        return not self.applied
