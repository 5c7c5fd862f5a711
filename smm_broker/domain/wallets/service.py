"""Wallet ledger: balance mutations paired with funds transactions.

Every mutation of a wallet runs under a per-user ``asyncio.Lock`` and is
written with a compare-and-swap on ``wallets.version``, so concurrent
reservations inside one process serialise and writers in other processes
cannot cause a lost update. The funds transaction row is written in the same
database transaction as the balance change.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from smm_broker.core.config import WalletSettings
from smm_broker.db.models import FundsTransaction as FundsTransactionModel, Wallet as WalletModel
from smm_broker.infrastructure.database.repositories.wallet_repository import SqlWalletRepository

from .exceptions import ConcurrentWalletUpdateError, InvalidAmountError, TopupRejectedError
from .levels import DEFAULT_LEVEL_THRESHOLDS, calculate_account_level
from .models import (
    CreditResult,
    FundsTransactionRecord,
    PaymentMethod,
    TransactionStatus,
    TransactionType,
    WalletSnapshot,
)
from .repository import WalletRepository

logger = logging.getLogger(__name__)

TRANSACTION_SEQUENCE = "funds_transaction"
MONEY_QUANTUM = Decimal("0.0001")


def to_money(amount: Decimal | int | float | str) -> Decimal:
    try:
        value = Decimal(str(amount)).quantize(MONEY_QUANTUM)
    except InvalidOperation as exc:
        raise InvalidAmountError(f"invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise InvalidAmountError(f"invalid amount: {amount!r}")
    if value <= 0:
        raise InvalidAmountError(f"amount must be greater than 0, got {amount!r}")
    return value


@dataclass(slots=True)
class _Mutation:
    transaction: FundsTransactionRecord
    balance: Decimal


class WalletService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        currency: str = "NGN",
        transaction_id_start: int = 2301780,
        level_thresholds: Sequence[Decimal] = DEFAULT_LEVEL_THRESHOLDS,
        max_attempts: int = 5,
        repository_factory: Callable[[AsyncSession], WalletRepository] = SqlWalletRepository,
    ) -> None:
        self._session_factory = session_factory
        self._repository_factory = repository_factory
        self.currency = currency
        self.transaction_id_start = transaction_id_start
        self.level_thresholds = tuple(level_thresholds)
        self.max_attempts = max_attempts
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()
        self._sequence_ready = False

    @classmethod
    def from_settings(
        cls, session_factory: async_sessionmaker[AsyncSession], settings: WalletSettings
    ) -> "WalletService":
        return cls(
            session_factory,
            currency=settings.currency,
            transaction_id_start=settings.transaction_id_start,
            level_thresholds=settings.level_thresholds,
        )

    async def ensure_wallet(self, user_id: str) -> WalletSnapshot:
        async with self._lock_for(user_id):
            return self._to_snapshot(await self._ensure_wallet_row(user_id))

    async def reserve(
        self,
        user_id: str,
        amount: Decimal,
        *,
        description: Optional[str] = None,
    ) -> bool:
        """Debit ``amount`` if the balance covers it; False when it does not."""
        value = to_money(amount)
        async with self._lock_for(user_id):
            mutation = await self._apply(
                user_id,
                -value,
                type=TransactionType.DEBIT,
                method=PaymentMethod.SYSTEM,
                description=description or "Order reservation",
            )
        if mutation is None:
            logger.info("Reservation of %s declined for user %s: insufficient balance", value, user_id)
            return False
        return True

    async def refund(
        self,
        user_id: str,
        amount: Decimal,
        *,
        description: Optional[str] = None,
    ) -> bool:
        value = to_money(amount)
        async with self._lock_for(user_id):
            await self._apply(
                user_id,
                value,
                type=TransactionType.CREDIT,
                method=PaymentMethod.SYSTEM,
                description=description or "Order refund",
            )
        logger.info("Refunded %s to user %s", value, user_id)
        return True

    async def credit(
        self,
        user_id: str,
        amount: Decimal,
        *,
        method: PaymentMethod | str,
        external_reference: str,
        status: TransactionStatus | str,
        description: Optional[str] = None,
    ) -> CreditResult:
        """Apply a confirmed top-up exactly once per ``external_reference``."""
        try:
            confirmed = TransactionStatus(status) is TransactionStatus.SUCCESSFUL
        except ValueError:
            confirmed = False
        if not confirmed:
            raise TopupRejectedError(f"top-up {external_reference} is not successful (status={status})")
        if not external_reference:
            raise TopupRejectedError("top-up requires an external reference")
        value = to_money(amount)
        method_value = PaymentMethod(method).value

        async with self._lock_for(user_id):
            existing = await self._find_by_reference(external_reference)
            if existing is not None:
                return self._duplicate_result(user_id, existing)
            try:
                mutation = await self._apply(
                    user_id,
                    value,
                    type=TransactionType.CREDIT,
                    method=method_value,
                    reference=external_reference,
                    description=description or "Wallet top-up",
                )
            except IntegrityError:
                # Another process recorded the same reference first.
                existing = await self._find_by_reference(external_reference)
                if existing is None:
                    raise
                return self._duplicate_result(user_id, existing)

        assert mutation is not None  # credits never fail the balance check
        logger.info("Credited %s to user %s (reference %s)", value, user_id, external_reference)
        return CreditResult(applied=True, balance=mutation.balance, transaction=mutation.transaction)

    async def sync_total_spent(self, user_id: str, total_spent: Decimal) -> WalletSnapshot:
        """Store a new spend total and recompute the account level from it."""
        spent = Decimal(str(total_spent)).quantize(MONEY_QUANTUM)
        if spent < 0:
            raise InvalidAmountError(f"total spent cannot be negative, got {total_spent!r}")
        async with self._lock_for(user_id):
            await self._ensure_wallet_row(user_id)
            for _ in range(self.max_attempts):
                async with self._session_factory() as session, session.begin():
                    repository = self._repository_factory(session)
                    wallet = await repository.get_wallet(user_id, for_update=True)
                    assert wallet is not None
                    if Decimal(wallet.total_spent) == spent:
                        return self._to_snapshot(wallet)
                    level = calculate_account_level(spent, self.level_thresholds)
                    swapped = await repository.compare_and_swap(
                        user_id,
                        expected_version=wallet.version,
                        balance=Decimal(wallet.balance),
                        total_spent=spent,
                        account_level=level,
                    )
                    if swapped:
                        return WalletSnapshot(
                            user_id=user_id,
                            balance=Decimal(wallet.balance),
                            total_spent=spent,
                            account_level=level,
                            currency=wallet.currency,
                            version=wallet.version + 1,
                            updated_at=wallet.updated_at,
                        )
        raise ConcurrentWalletUpdateError(f"wallet {user_id} changed during total spent update")

    async def list_transactions(self, user_id: str, limit: int = 20, offset: int = 0) -> list[FundsTransactionRecord]:
        async with self._session_factory() as session:
            rows = await self._repository_factory(session).list_transactions(user_id, limit, offset)
        return [self._to_transaction(row) for row in rows]

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def _ensure_wallet_row(self, user_id: str) -> WalletModel:
        async with self._session_factory() as session:
            repository = self._repository_factory(session)
            wallet = await repository.get_wallet(user_id)
            if wallet is None:
                wallet = await repository.create_wallet(user_id, self.currency)
            if not self._sequence_ready:
                await repository.ensure_sequence(TRANSACTION_SEQUENCE, self.transaction_id_start)
            await session.commit()
        self._sequence_ready = True
        return wallet

    async def _apply(
        self,
        user_id: str,
        delta: Decimal,
        *,
        type: TransactionType,
        method: PaymentMethod | str,
        reference: Optional[str] = None,
        description: Optional[str] = None,
    ) -> _Mutation | None:
        """Read-check-swap loop; caller must hold the user's lock."""
        await self._ensure_wallet_row(user_id)
        method_value = method.value if isinstance(method, PaymentMethod) else method

        for attempt in range(1, self.max_attempts + 1):
            async with self._session_factory() as session, session.begin():
                repository = self._repository_factory(session)
                wallet = await repository.get_wallet(user_id, for_update=True)
                assert wallet is not None
                before = Decimal(wallet.balance)
                after = before + delta
                if after < 0:
                    return None

                total_spent = Decimal(wallet.total_spent)
                swapped = await repository.compare_and_swap(
                    user_id,
                    expected_version=wallet.version,
                    balance=after,
                    total_spent=total_spent,
                    account_level=calculate_account_level(total_spent, self.level_thresholds),
                )
                if not swapped:
                    logger.debug("Wallet %s version moved, retrying (attempt %s)", user_id, attempt)
                    continue

                transaction_id = await repository.next_sequence_value(TRANSACTION_SEQUENCE)
                model = await repository.add_transaction(
                    transaction_id=transaction_id,
                    user_id=user_id,
                    type=type.value,
                    status=TransactionStatus.SUCCESSFUL.value,
                    amount=abs(delta),
                    balance_before=before,
                    balance_after=after,
                    payment_method=method_value,
                    reference=reference,
                    description=description,
                )
                return _Mutation(transaction=self._to_transaction(model), balance=after)

        raise ConcurrentWalletUpdateError(f"wallet {user_id} changed during {type.value} of {abs(delta)}")

    async def _find_by_reference(self, reference: str) -> FundsTransactionModel | None:
        async with self._session_factory() as session:
            return await self._repository_factory(session).get_transaction_by_reference(reference)

    def _duplicate_result(self, user_id: str, existing: FundsTransactionModel) -> CreditResult:
        if existing.user_id != user_id:
            raise TopupRejectedError(f"reference {existing.reference} belongs to another account")
        if existing.status != TransactionStatus.SUCCESSFUL.value:
            raise TopupRejectedError(f"reference {existing.reference} was recorded as {existing.status}")
        logger.info("Top-up %s already applied, skipping", existing.reference)
        record = self._to_transaction(existing)
        return CreditResult(applied=False, balance=record.balance_after, transaction=record)

    @staticmethod
    def _to_snapshot(model: WalletModel) -> WalletSnapshot:
        return WalletSnapshot(
            user_id=model.user_id,
            balance=Decimal(model.balance),
            total_spent=Decimal(model.total_spent),
            account_level=model.account_level,
            currency=model.currency,
            version=model.version,
            updated_at=model.updated_at,
        )

    @staticmethod
    def _to_transaction(model: FundsTransactionModel) -> FundsTransactionRecord:
        return FundsTransactionRecord(
            transaction_id=int(model.transaction_id),
            user_id=model.user_id,
            type=TransactionType(model.type),
            status=TransactionStatus(model.status),
            amount=Decimal(model.amount),
            balance_before=Decimal(model.balance_before),
            balance_after=Decimal(model.balance_after),
            payment_method=model.payment_method,
            reference=model.reference,
            description=model.description,
            created_at=model.created_at,
        )
