"""Repository protocol for template persistence."""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from template_market.db.models import Template as TemplateModel


class TemplateRepository(Protocol):
    async def create(self, **values: Any) -> TemplateModel:
        ...

    async def get_by_id(self, template_id: str) -> TemplateModel | None:
        ...

    async def list_by_status(self, status: str) -> Sequence[TemplateModel]:
        ...

    async def list_by_owner(self, owner_id: str) -> Sequence[TemplateModel]:
        ...

    async def search(
        self,
        *,
        offset: int,
        limit: int,
        status: Optional[str] = None,
        category: Optional[str] = None,
        text: Optional[str] = None,
    ) -> tuple[Sequence[TemplateModel], int]:
        ...

    async def update_fields(self, template_id: str, values: dict[str, Any]) -> TemplateModel | None:
        ...

    async def delete(self, template_id: str) -> bool:
        ...

    async def commit(self) -> None:
        ...
