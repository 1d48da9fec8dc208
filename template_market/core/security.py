"""JWT helpers for access and refresh tokens."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from template_market.core.config import SecuritySettings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenError(Exception):
    """Raised when a token cannot be decoded or carries the wrong claims."""


@dataclass(frozen=True, slots=True)
class TokenClaims:
    account_id: str
    role: str
    token_type: str


@dataclass(slots=True)
class TokenCodec:
    settings: SecuritySettings

    def create_access_token(
        self, account_id: str, role: str, expires_delta: Optional[timedelta] = None
    ) -> str:
        expire_delta = expires_delta or timedelta(minutes=self.settings.access_token_expire_minutes)
        return self._encode(account_id, role, ACCESS_TOKEN_TYPE, expire_delta, self.settings.secret_key)

    def create_refresh_token(
        self, account_id: str, role: str, expires_delta: Optional[timedelta] = None
    ) -> str:
        expire_delta = expires_delta or timedelta(days=self.settings.refresh_token_expire_days)
        return self._encode(
            account_id, role, REFRESH_TOKEN_TYPE, expire_delta, self.settings.refresh_secret_key
        )

    def decode_access_token(self, token: str) -> TokenClaims:
        return self._decode(token, self.settings.secret_key, ACCESS_TOKEN_TYPE)

    def decode_refresh_token(self, token: str) -> TokenClaims:
        return self._decode(token, self.settings.refresh_secret_key, REFRESH_TOKEN_TYPE)

    def _encode(
        self, account_id: str, role: str, token_type: str, expire_delta: timedelta, secret: str
    ) -> str:
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": account_id,
            "role": role,
            "type": token_type,
            "jti": secrets.token_hex(8),
            "iat": now,
            "exp": now + expire_delta,
        }
        return jwt.encode(payload, secret, algorithm=self.settings.algorithm)

    def _decode(self, token: str, secret: str, expected_type: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, secret, algorithms=[self.settings.algorithm])
        except JWTError as exc:
            raise TokenError("could not validate credentials") from exc

        account_id = payload.get("sub")
        role = payload.get("role")
        token_type = payload.get("type")
        if not all([account_id, role]) or token_type != expected_type:
            raise TokenError("could not validate credentials")
        return TokenClaims(account_id=account_id, role=role, token_type=token_type)


__all__ = [
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_TYPE",
    "TokenClaims",
    "TokenCodec",
    "TokenError",
]
