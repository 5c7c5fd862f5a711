"""User directory lookups."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from smm_broker.db.models import User as UserModel
from smm_broker.infrastructure.database.repositories.account_repository import SqlAccountRepository

from .models import Account
from .repository import AccountRepository


class AccountService:
    """Encapsulates the user directory use cases the order engine needs."""

    def __init__(self, repository: AccountRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        return cls(SqlAccountRepository(session))

    async def get_by_id(self, account_id: str) -> Account | None:
        model = await self._repository.get_by_id(account_id)
        return self._to_domain(model) if model else None

    async def create_account(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str | None = None,
        is_active: bool = True,
    ) -> Account:
        model = await self._repository.create_account(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email,
            is_active=is_active,
        )
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: UserModel) -> Account:
        return Account(
            id=model.id,
            first_name=model.first_name,
            last_name=model.last_name,
            is_active=bool(model.is_active),
            email=model.email,
            created_at=model.created_at,
        )
