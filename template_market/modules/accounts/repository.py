"""Repository protocol for accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from template_market.db.models import Account as AccountModel


class AccountRepository(Protocol):
    """Abstract repository interface for account persistence."""

    async def get_by_id(self, account_id: str) -> AccountModel | None:
        ...

    async def get_by_email(self, email: str) -> AccountModel | None:
        ...

    async def list_accounts(self) -> Sequence[AccountModel]:
        ...

    async def create_account(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        role: str,
        is_active: bool,
    ) -> AccountModel:
        ...

    async def set_role(self, account_id: str, role: str) -> AccountModel | None:
        ...

    async def set_refresh_token_hash(self, account_id: str, token_hash: str | None) -> None:
        ...

    async def set_last_login(self, account_id: str, timestamp: datetime) -> None:
        ...
