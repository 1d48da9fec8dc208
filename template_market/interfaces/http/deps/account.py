"""Authentication dependencies resolving the calling account."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from template_market.core.security import TokenError
from template_market.modules.accounts import Account, AccountService, Principal

from .database import get_db_session

security = HTTPBearer()


def get_account_service(db: AsyncSession = Depends(get_db_session)) -> AccountService:
    return AccountService.with_session(db)


async def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    service: AccountService = Depends(get_account_service),
) -> Account:
    try:
        account = await service.get_by_access_token(credentials.credentials)
    except TokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials") from exc
    if account is None or not account.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account missing or disabled")
    return account


async def get_current_admin(account: Account = Depends(get_current_account)) -> Account:
    if not account.is_admin():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return account


async def get_principal(account: Account = Depends(get_current_account)) -> Principal:
    return Principal.of(account)


__all__ = [
    "get_account_service",
    "get_current_account",
    "get_current_admin",
    "get_principal",
    "security",
]
