"""SQLAlchemy implementation for wallet domain"""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from sqlalchemy import desc, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from smm_broker.db.models import FundsTransaction, IdSequence, Wallet


class SqlWalletRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_wallet(self, user_id: str, *, for_update: bool = False) -> Wallet | None:
        stmt = select(Wallet).where(Wallet.user_id == user_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        return result.scalars().first()

    async def create_wallet(self, user_id: str, currency: str) -> Wallet:
        wallet = Wallet(
            user_id=user_id,
            currency=currency,
            balance=Decimal("0"),
            total_spent=Decimal("0"),
            account_level=1,
            version=0,
        )
        self.session.add(wallet)
        try:
            await self.session.flush()
            await self.session.refresh(wallet)
        except IntegrityError:
            await self.session.rollback()
            wallet = await self.get_wallet(user_id)
            if wallet is None:
                raise
        return wallet

    async def compare_and_swap(
        self,
        user_id: str,
        *,
        expected_version: int,
        balance: Decimal,
        total_spent: Decimal,
        account_level: int,
    ) -> bool:
        stmt = (
            update(Wallet)
            .where(Wallet.user_id == user_id, Wallet.version == expected_version)
            .values(
                balance=balance,
                total_spent=total_spent,
                account_level=account_level,
                version=expected_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def ensure_sequence(self, name: str, start: int) -> None:
        existing = await self.session.get(IdSequence, name)
        if existing is not None:
            return
        # Stored as the last issued value, so the first call hands out ``start``.
        self.session.add(IdSequence(name=name, value=start - 1))
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()

    async def next_sequence_value(self, name: str) -> int:
        stmt = (
            update(IdSequence)
            .where(IdSequence.name == name)
            .values(value=IdSequence.value + 1)
            .returning(IdSequence.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        value = result.scalar_one_or_none()
        if value is None:
            raise LookupError(f"sequence {name!r} is not initialised")
        return int(value)

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
    ) -> FundsTransaction:
        tx = FundsTransaction(
            transaction_id=transaction_id,
            user_id=user_id,
            type=type,
            status=status,
            amount=amount,
            balance_before=balance_before,
            balance_after=balance_after,
            payment_method=payment_method,
            reference=reference,
            description=description,
        )
        self.session.add(tx)
        await self.session.flush()
        await self.session.refresh(tx)
        return tx

    async def get_transaction_by_reference(self, reference: str) -> FundsTransaction | None:
        stmt = select(FundsTransaction).where(FundsTransaction.reference == reference)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_transactions(self, user_id: str, limit: int, offset: int) -> Sequence[FundsTransaction]:
        stmt = (
            select(FundsTransaction)
            .where(FundsTransaction.user_id == user_id)
            .order_by(desc(FundsTransaction.created_at), desc(FundsTransaction.transaction_id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
