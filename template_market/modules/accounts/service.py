"""Domain services for account management."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from template_market.core.config import get_settings
from template_market.core.crypto import hash_password, hash_token, verify_password, verify_token
from template_market.core.security import TokenCodec, TokenError
from template_market.db.models import Account as AccountModel
from template_market.infrastructure.database.repositories.account_repository import SqlAccountRepository

from .exceptions import AccountAlreadyExistsError, AccountNotFoundError, InvalidRefreshTokenError
from .models import ROLES, Account, AccountCreateInput, TokenPair
from .repository import AccountRepository


class AccountService:
    """Encapsulates core account use cases."""

    def __init__(self, repository: AccountRepository, tokens: TokenCodec) -> None:
        self._repository = repository
        self._tokens = tokens

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        return cls(SqlAccountRepository(session), TokenCodec(get_settings().security))

    async def get_by_id(self, account_id: str) -> Account | None:
        model = await self._repository.get_by_id(account_id)
        return self._to_domain(model) if model else None

    async def get_by_access_token(self, token: str) -> Account | None:
        """Resolve a bearer token; raises ``TokenError`` when it does not decode."""
        claims = self._tokens.decode_access_token(token)
        return await self.get_by_id(claims.account_id)

    async def get_by_email(self, email: str) -> Account | None:
        model = await self._repository.get_by_email(_normalize_email(email))
        return self._to_domain(model) if model else None

    async def list_accounts(self) -> Sequence[Account]:
        models = await self._repository.list_accounts()
        return [self._to_domain(model) for model in models]

    async def create_account(self, payload: AccountCreateInput) -> Account:
        email = _normalize_email(payload.email)
        existing = await self._repository.get_by_email(email)
        if existing is not None:
            raise AccountAlreadyExistsError(f"email already registered: {email}")
        if payload.role not in ROLES:
            raise ValueError(f"unknown role: {payload.role}")

        model = await self._repository.create_account(
            username=payload.username,
            email=email,
            password_hash=hash_password(payload.password),
            role=payload.role,
            is_active=payload.is_active,
        )
        return self._to_domain(model)

    async def register(self, payload: AccountCreateInput) -> tuple[Account, TokenPair]:
        account = await self.create_account(payload)
        return account, await self.issue_tokens(account)

    async def authenticate(self, email: str, password: str) -> Account | None:
        account = await self.get_by_email(email)
        if account is None or not account.is_active:
            return None
        if not verify_password(password, account.password_hash):
            return None
        return account

    async def login(self, email: str, password: str) -> TokenPair | None:
        account = await self.authenticate(email, password)
        if account is None:
            return None
        await self._repository.set_last_login(account.id, datetime.now(timezone.utc))
        return await self.issue_tokens(account)

    async def issue_tokens(self, account: Account) -> TokenPair:
        pair = TokenPair(
            access_token=self._tokens.create_access_token(account.id, account.role),
            refresh_token=self._tokens.create_refresh_token(account.id, account.role),
        )
        await self._repository.set_refresh_token_hash(account.id, hash_token(pair.refresh_token))
        return pair

    async def refresh(self, refresh_token: str) -> TokenPair:
        try:
            claims = self._tokens.decode_refresh_token(refresh_token)
        except TokenError as exc:
            raise InvalidRefreshTokenError("invalid refresh token") from exc

        account = await self.get_by_id(claims.account_id)
        if account is None or not account.is_active:
            raise InvalidRefreshTokenError("account not found or disabled")
        if not verify_token(refresh_token, account.refresh_token_hash):
            raise InvalidRefreshTokenError("refresh token was revoked")
        return await self.issue_tokens(account)

    async def logout(self, account_id: str) -> None:
        await self._repository.set_refresh_token_hash(account_id, None)

    async def set_role(self, account_id: str, role: str) -> Account:
        if role not in ROLES:
            raise ValueError(f"unknown role: {role}")
        model = await self._repository.set_role(account_id, role)
        if model is None:
            raise AccountNotFoundError(account_id)
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: AccountModel) -> Account:
        return Account(
            id=str(model.id),
            username=model.username,
            email=model.email,
            role=model.role or "user",
            is_active=bool(model.is_active),
            password_hash=model.password_hash,
            refresh_token_hash=model.refresh_token_hash,
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_login_at=model.last_login_at,
        )


def _normalize_email(email: str) -> str:
    return email.strip().lower()
