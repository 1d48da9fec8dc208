"""Domain models for marketplace templates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class TemplateStatus(str, Enum):
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"


@dataclass(slots=True)
class Template:
    id: str
    title: str
    description: str
    tags: list[str]
    category: Optional[str]
    tech_stack: Optional[str]
    price: Decimal
    preview_image_url: Optional[str]
    download_url: Optional[str]
    is_premium: bool
    status: TemplateStatus
    admin_comment: Optional[str]
    created_by: str
    reviewed_by: Optional[str]
    reviewed_at: Optional[datetime]
    demo_url: Optional[str]
    has_live_demo: bool
    demo_deployment_id: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_owned_by(self, account_id: str) -> bool:
        return self.created_by == account_id


@dataclass(slots=True)
class TemplateCreateInput:
    title: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    category: Optional[str] = None
    tech_stack: Optional[str] = None
    price: Decimal | int | float | str = Decimal("0")
    preview_image_url: Optional[str] = None
    download_url: Optional[str] = None
    is_premium: bool = False


# Sentinel used to differentiate between "not provided" and explicit None.
UNSET = object()


@dataclass(slots=True)
class TemplatePatch:
    """Partial update of listing fields.

    Moderation and demo fields only change through ``update_status`` and the
    demo operations, never through a patch.
    """

    title: str | object = UNSET
    description: str | object = UNSET
    tags: list[str] | object = UNSET
    category: Optional[str] | object = UNSET
    tech_stack: Optional[str] | object = UNSET
    price: Decimal | int | float | str | object = UNSET
    preview_image_url: Optional[str] | object = UNSET
    download_url: Optional[str] | object = UNSET
    is_premium: bool | object = UNSET

    def provided(self) -> dict[str, object]:
        return {
            name: getattr(self, name)
            for name in self.__dataclass_fields__
            if getattr(self, name) is not UNSET
        }


@dataclass(slots=True)
class TemplatePage:
    items: list[Template]
    total: int
    page: int
    page_size: int
