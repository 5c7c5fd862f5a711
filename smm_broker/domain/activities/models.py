"""User activity domain model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from smm_broker.db import models as orm


@dataclass(slots=True)
class Activity:
    id: int
    user_id: str
    action: str
    created_at: Optional[datetime]

    @classmethod
    def from_orm(cls, instance: orm.Activity) -> "Activity":
        return cls(
            id=int(instance.id),
            user_id=instance.user_id,
            action=instance.action or "",
            created_at=instance.created_at,
        )
