"""Application service handling marketplace template workflows."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from template_market.db.models import Template as TemplateModel
from template_market.infrastructure.database.repositories.template_repository import SqlTemplateRepository
from template_market.modules.accounts.models import Principal

from .exceptions import TemplateNotFoundError, TemplatePermissionError, TemplateValidationError
from .models import Template, TemplateCreateInput, TemplatePage, TemplatePatch, TemplateStatus
from .repository import TemplateRepository

_CENTS = Decimal("0.01")
MAX_PAGE_SIZE = 100


@dataclass(slots=True)
class TemplateService:
    repository: TemplateRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "TemplateService":
        return cls(SqlTemplateRepository(session))

    async def create_template(self, payload: TemplateCreateInput, creator: Principal) -> Template:
        status = TemplateStatus.PUBLISHED if creator.is_admin else TemplateStatus.PENDING
        model = await self.repository.create(
            title=_require_title(payload.title),
            description=payload.description or "",
            tags=json.dumps(normalize_tags(payload.tags), ensure_ascii=False),
            category=payload.category,
            tech_stack=payload.tech_stack,
            price_cents=_to_cents(normalize_price(payload.price)),
            preview_image_url=payload.preview_image_url,
            download_url=payload.download_url,
            is_premium=payload.is_premium,
            status=status.value,
            created_by=creator.account_id,
        )
        return self._to_domain(model)

    async def get_template(self, template_id: str) -> Template:
        if not _is_valid_id(template_id):
            raise TemplateNotFoundError(template_id)
        model = await self.repository.get_by_id(template_id)
        if model is None:
            raise TemplateNotFoundError(template_id)
        return self._to_domain(model)

    async def list_by_status(self, status: TemplateStatus) -> list[Template]:
        models = await self.repository.list_by_status(TemplateStatus(status).value)
        return [self._to_domain(model) for model in models]

    async def list_by_owner(self, owner_id: str) -> list[Template]:
        models = await self.repository.list_by_owner(owner_id)
        return [self._to_domain(model) for model in models]

    async def list_templates(
        self,
        *,
        page: int = 1,
        page_size: int = 20,
        status: Optional[TemplateStatus] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> TemplatePage:
        page = max(page, 1)
        page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
        models, total = await self.repository.search(
            offset=(page - 1) * page_size,
            limit=page_size,
            status=TemplateStatus(status).value if status is not None else None,
            category=category,
            text=search.strip() if search and search.strip() else None,
        )
        return TemplatePage(
            items=[self._to_domain(model) for model in models],
            total=total,
            page=page,
            page_size=page_size,
        )

    async def update_status(
        self,
        template_id: str,
        *,
        status: TemplateStatus,
        reviewer: Principal,
        comment: Optional[str] = None,
    ) -> Template:
        if not reviewer.is_admin:
            raise TemplatePermissionError("only reviewers may change the moderation status")
        await self.get_template(template_id)
        return await self._write(
            template_id,
            {
                "status": TemplateStatus(status).value,
                "admin_comment": comment,
                "reviewed_by": reviewer.account_id,
                "reviewed_at": datetime.now(timezone.utc),
            },
        )

    async def update_template(
        self, template_id: str, patch: TemplatePatch, principal: Principal
    ) -> Template:
        current = await self.get_template(template_id)
        ensure_can_manage(current, principal)

        values: dict[str, Any] = {}
        for name, value in patch.provided().items():
            if name == "title":
                values["title"] = _require_title(value)
            elif name == "tags":
                values["tags"] = json.dumps(normalize_tags(value), ensure_ascii=False)
            elif name == "price":
                values["price_cents"] = _to_cents(normalize_price(value))
            elif name == "description":
                values["description"] = value or ""
            else:
                values[name] = value
        return await self._write(template_id, values)

    async def apply_demo(self, template_id: str, *, demo_url: str, deployment_id: str) -> Template:
        """Record a published demo; the three demo fields are written together."""
        if not demo_url or not deployment_id:
            raise TemplateValidationError("demo url and deployment id are both required")
        template = await self._write(
            template_id,
            {"demo_url": demo_url, "has_live_demo": True, "demo_deployment_id": deployment_id},
        )
        await self.repository.commit()
        return template

    async def clear_demo(self, template_id: str) -> Template:
        template = await self._write(
            template_id,
            {"demo_url": None, "has_live_demo": False, "demo_deployment_id": None},
        )
        await self.repository.commit()
        return template

    async def delete_template(self, template_id: str) -> None:
        if not _is_valid_id(template_id) or not await self.repository.delete(template_id):
            raise TemplateNotFoundError(template_id)

    async def _write(self, template_id: str, values: dict[str, Any]) -> Template:
        model = await self.repository.update_fields(template_id, values)
        if model is None:
            raise TemplateNotFoundError(template_id)
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: TemplateModel) -> Template:
        try:
            tags = json.loads(model.tags) if model.tags else []
        except json.JSONDecodeError:
            tags = []
        return Template(
            id=model.id,
            title=model.title,
            description=model.description or "",
            tags=tags,
            category=model.category,
            tech_stack=model.tech_stack,
            price=(Decimal(model.price_cents or 0) / 100).quantize(_CENTS),
            preview_image_url=model.preview_image_url,
            download_url=model.download_url,
            is_premium=bool(model.is_premium),
            status=TemplateStatus(model.status),
            admin_comment=model.admin_comment,
            created_by=model.created_by,
            reviewed_by=model.reviewed_by,
            reviewed_at=model.reviewed_at,
            demo_url=model.demo_url,
            has_live_demo=bool(model.has_live_demo),
            demo_deployment_id=model.demo_deployment_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


def ensure_can_manage(template: Template, principal: Principal) -> None:
    if not (principal.is_admin or template.is_owned_by(principal.account_id)):
        raise TemplatePermissionError("only the owner or an admin may modify this template")


def normalize_price(value: Decimal | int | float | str | None) -> Decimal:
    """Validate a price and round it to cents."""
    if value is None or value == "":
        return Decimal("0.00")
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise TemplateValidationError(f"invalid price: {value!r}") from exc
    if not price.is_finite():
        raise TemplateValidationError(f"invalid price: {value!r}")
    if price < 0:
        raise TemplateValidationError("price must not be negative")
    return price.quantize(_CENTS, rounding=ROUND_HALF_UP)


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    if not tags:
        return []
    return [tag.strip() for tag in tags if tag and tag.strip()]


def _to_cents(price: Decimal) -> int:
    return int(price * 100)


def _require_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise TemplateValidationError("title is required")
    return title.strip()


def _is_valid_id(template_id: str) -> bool:
    try:
        uuid.UUID(str(template_id))
    except ValueError:
        return False
    return True
