"""Domain service for the user activity log."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from smm_broker.domain.accounts import AccountNotFoundError, AccountService
from smm_broker.infrastructure.database.repositories.activity_repository import SqlActivityRepository

from .models import Activity
from .repository import ActivityRepository


@dataclass(slots=True)
class ActivityService:
    repository: ActivityRepository
    accounts: AccountService

    @classmethod
    def with_session(cls, session: AsyncSession) -> "ActivityService":
        return cls(SqlActivityRepository(session), AccountService.with_session(session))

    async def record(self, user_id: str, action: str) -> Activity:
        """Store ``"<first> <last> <action>"`` for the user."""
        account = await self.accounts.get_by_id(user_id)
        if account is None:
            raise AccountNotFoundError(user_id)
        model = await self.repository.add_activity(
            user_id=account.id,
            action=f"{account.display_name} {action}",
        )
        return Activity.from_orm(model)

    async def list_activities(self, user_id: str, limit: int = 20, offset: int = 0) -> list[Activity]:
        rows = await self.repository.list_activities(user_id, limit, offset)
        return [Activity.from_orm(row) for row in rows]
