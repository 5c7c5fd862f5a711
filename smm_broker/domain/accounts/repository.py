"""Repository protocol for accounts."""

from __future__ import annotations

from typing import Protocol

from smm_broker.db.models import User as UserModel


class AccountRepository(Protocol):
    """Read side of the user directory plus the insert used for seeding."""

    async def get_by_id(self, account_id: str) -> UserModel | None:
        ...

    async def create_account(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str | None,
        is_active: bool,
    ) -> UserModel:
        ...
