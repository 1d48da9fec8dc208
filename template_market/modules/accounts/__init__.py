"""Account domain services and models."""

from .exceptions import (
    AccountAlreadyExistsError,
    AccountError,
    AccountNotFoundError,
    InvalidRefreshTokenError,
)
from .models import ROLE_ADMIN, ROLE_USER, Account, AccountCreateInput, Principal, TokenPair
from .service import AccountService

__all__ = [
    "Account",
    "AccountCreateInput",
    "AccountService",
    "AccountError",
    "AccountAlreadyExistsError",
    "AccountNotFoundError",
    "InvalidRefreshTokenError",
    "Principal",
    "TokenPair",
    "ROLE_ADMIN",
    "ROLE_USER",
]
