"""SQLAlchemy-backed repository implementations."""

from .account_repository import SqlAccountRepository
from .template_repository import SqlTemplateRepository

__all__ = [
    "SqlAccountRepository",
    "SqlTemplateRepository",
]
