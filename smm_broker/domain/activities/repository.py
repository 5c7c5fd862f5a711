"""Repository protocol for persisting user activities."""

from __future__ import annotations

from typing import Protocol, Sequence

from smm_broker.db.models import Activity as ActivityModel


class ActivityRepository(Protocol):
    async def add_activity(self, *, user_id: str, action: str) -> ActivityModel:
        ...

    async def list_activities(self, user_id: str, limit: int, offset: int) -> Sequence[ActivityModel]:
        ...
