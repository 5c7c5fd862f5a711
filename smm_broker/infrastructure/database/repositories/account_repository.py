"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from sqlalchemy import select

from smm_broker.db.models import User
from smm_broker.domain.common import AsyncRepository


class SqlAccountRepository(AsyncRepository[User]):
    """Account repository backed by the ``users`` table."""

    async def get_by_id(self, account_id: str) -> User | None:
        stmt = select(User).where(User.id == account_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_account(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str | None,
        is_active: bool,
    ) -> User:
        user = await self.add(
            User(
                first_name=first_name,
                last_name=last_name,
                email=email,
                is_active=is_active,
            )
        )
        await self.session.refresh(user)
        return user
