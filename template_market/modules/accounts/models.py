"""Domain models for accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = frozenset({ROLE_USER, ROLE_ADMIN})


@dataclass(slots=True)
class Account:
    id: str
    username: str
    email: str
    role: str
    is_active: bool
    password_hash: str = field(repr=False)
    refresh_token_hash: Optional[str] = field(default=None, repr=False)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass(slots=True)
class AccountCreateInput:
    username: str
    email: str
    password: str
    role: str = ROLE_USER
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class Principal:
    """The authenticated caller as seen by domain services."""

    account_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def of(cls, account: Account) -> "Principal":
        return cls(account_id=account.id, role=account.role)


@dataclass(frozen=True, slots=True)
class TokenPair:
    access_token: str
    refresh_token: str
