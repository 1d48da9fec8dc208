"""Reusable FastAPI dependencies."""

from .account import get_account_service, get_current_account, get_current_admin, get_principal
from .container import get_app_container
from .database import get_db_session

__all__ = [
    "get_account_service",
    "get_app_container",
    "get_current_account",
    "get_current_admin",
    "get_db_session",
    "get_principal",
]
