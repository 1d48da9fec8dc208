"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from template_market.db.models import Account as AccountModel


class SqlAccountRepository:
    """Account repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: str) -> AccountModel | None:
        stmt = select(AccountModel).where(AccountModel.id == account_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> AccountModel | None:
        stmt = select(AccountModel).where(AccountModel.email == email)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_accounts(self) -> Sequence[AccountModel]:
        stmt = select(AccountModel).order_by(AccountModel.created_at.desc())
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def create_account(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        role: str,
        is_active: bool,
    ) -> AccountModel:
        model = AccountModel(
            username=username,
            email=email,
            password_hash=password_hash,
            role=role,
            is_active=is_active,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return model

    async def set_role(self, account_id: str, role: str) -> AccountModel | None:
        model = await self.get_by_id(account_id)
        if model is None:
            return None
        model.role = role
        await self._session.flush()
        await self._session.refresh(model)
        return model

    async def set_refresh_token_hash(self, account_id: str, token_hash: str | None) -> None:
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(refresh_token_hash=token_hash)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.execute(stmt)

    async def set_last_login(self, account_id: str, timestamp: datetime) -> None:
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(last_login_at=timestamp)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.execute(stmt)
