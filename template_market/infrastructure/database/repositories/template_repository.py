"""SQLAlchemy implementation for the marketplace template repository."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from template_market.db.models import Template


class SqlTemplateRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, **values: Any) -> Template:
        template = Template(**values)
        self.session.add(template)
        await self.session.flush()
        await self.session.refresh(template)
        return template

    async def get_by_id(self, template_id: str) -> Template | None:
        stmt = (
            select(Template)
            .where(Template.id == template_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_by_status(self, status: str) -> Sequence[Template]:
        stmt = (
            select(Template)
            .where(Template.status == status)
            .order_by(Template.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_by_owner(self, owner_id: str) -> Sequence[Template]:
        stmt = (
            select(Template)
            .where(Template.created_by == owner_id)
            .order_by(Template.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def search(
        self,
        *,
        offset: int,
        limit: int,
        status: Optional[str] = None,
        category: Optional[str] = None,
        text: Optional[str] = None,
    ) -> tuple[Sequence[Template], int]:
        conditions = []
        if status is not None:
            conditions.append(Template.status == status)
        if category:
            conditions.append(Template.category == category)
        if text:
            pattern = f"%{_escape_like(text.lower())}%"
            conditions.append(
                or_(
                    func.lower(Template.title).like(pattern, escape="\\"),
                    func.lower(Template.description).like(pattern, escape="\\"),
                )
            )

        count_stmt = select(func.count()).select_from(Template).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(Template)
            .where(*conditions)
            .order_by(Template.created_at.desc(), Template.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all(), total

    async def update_fields(self, template_id: str, values: dict[str, Any]) -> Template | None:
        if not values:
            return await self.get_by_id(template_id)
        stmt = (
            update(Template)
            .where(Template.id == template_id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(template_id)

    async def delete(self, template_id: str) -> bool:
        stmt = delete(Template).where(Template.id == template_id)
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def commit(self) -> None:
        await self.session.commit()


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
