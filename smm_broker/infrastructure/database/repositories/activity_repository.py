"""SQLAlchemy implementation for the activity log."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import desc, select

from smm_broker.db.models import Activity
from smm_broker.domain.common import AsyncRepository


class SqlActivityRepository(AsyncRepository[Activity]):
    async def add_activity(self, *, user_id: str, action: str) -> Activity:
        activity = await self.add(Activity(user_id=user_id, action=action))
        await self.session.refresh(activity)
        return activity

    async def list_activities(self, user_id: str, limit: int, offset: int) -> Sequence[Activity]:
        stmt = (
            select(Activity)
            .where(Activity.user_id == user_id)
            .order_by(desc(Activity.created_at), desc(Activity.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
