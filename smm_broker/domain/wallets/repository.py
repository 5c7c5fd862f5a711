"""Repository protocol for wallet operations."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, Sequence

from smm_broker.db.models import FundsTransaction as FundsTransactionModel, Wallet as WalletModel


class WalletRepository(Protocol):
    async def get_wallet(self, user_id: str, *, for_update: bool = False) -> WalletModel | None:
        ...

    async def create_wallet(self, user_id: str, currency: str) -> WalletModel:
        ...

    async def compare_and_swap(
        self,
        user_id: str,
        *,
        expected_version: int,
        balance: Decimal,
        total_spent: Decimal,
        account_level: int,
    ) -> bool:
        ...

    async def ensure_sequence(self, name: str, start: int) -> None:
        ...

    async def next_sequence_value(self, name: str) -> int:
        ...

    async def add_transaction(
        self,
        *,
        transaction_id: int,
        user_id: str,
        type: str,
        status: str,
        amount: Decimal,
        balance_before: Decimal,
        balance_after: Decimal,
        payment_method: str,
        reference: str | None,
        description: str | None,
    ) -> FundsTransactionModel:
        ...

    async def get_transaction_by_reference(self, reference: str) -> FundsTransactionModel | None:
        ...

    async def list_transactions(self, user_id: str, limit: int, offset: int) -> Sequence[FundsTransactionModel]:
        ...
