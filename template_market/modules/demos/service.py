"""Demo generation pipeline for marketplace templates.

One run walks ``requested -> authorized -> staged -> resolved -> published
-> recorded -> done``. Each stage either returns its value or raises a
:class:`DemoError` subclass naming that stage, and the run is marked
``failed``. Local scratch files are released on every exit path through an
``AsyncExitStack``; the release callback logs problems instead of raising
so it never hides the original error.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from template_market.core.container import ApplicationContainer
from template_market.infrastructure.storage import (
    CacheInvalidator,
    ObjectStorage,
    StorageError,
    archive_key_from_reference,
)
from template_market.modules.accounts.models import Principal
from template_market.modules.templates import Template, TemplateError, TemplateNotFoundError, TemplateService

from .exceptions import (
    DemoError,
    DemoForbiddenError,
    MissingArchiveError,
    PersistenceError,
    RemovalError,
    UploadError,
)
from .materializer import ArchiveMaterializer, AsyncReadable
from .models import DemoDetails, DemoRun, DemoState, new_demo_id
from .resolver import SiteStructureResolver

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DemoService:
    templates: TemplateService
    materializer: ArchiveMaterializer
    resolver: SiteStructureResolver
    storage: ObjectStorage
    invalidator: Optional[CacheInvalidator] = None
    upload_timeout: Optional[float] = None

    @classmethod
    def with_session(cls, session: AsyncSession, container: ApplicationContainer) -> "DemoService":
        demo_settings = container.settings.demo
        return cls(
            templates=TemplateService.with_session(session),
            materializer=ArchiveMaterializer(
                container.archive_storage,
                demo_settings.scratch_dir,
                download_timeout=demo_settings.download_timeout,
                extract_timeout=demo_settings.extract_timeout,
            ),
            resolver=SiteStructureResolver(),
            storage=container.demo_storage,
            invalidator=container.invalidator,
            upload_timeout=demo_settings.upload_timeout,
        )

    async def generate_demo(self, template_id: str, principal: Principal) -> str:
        """Publish the template's archive as a static site and return its URL."""
        run = DemoRun(template_id=template_id)
        try:
            template = await self._authorize(template_id, principal)
            if not template.download_url:
                raise MissingArchiveError("template has no downloadable package", template_id=template_id)
            run.demo_id = new_demo_id(template.id)
            run.advance(DemoState.AUTHORIZED)

            async with AsyncExitStack() as scratch:
                staged = await self.materializer.stage(
                    archive_key_from_reference(template.download_url), run.demo_id
                )
                scratch.push_async_callback(self.materializer.release, staged)
                run.advance(DemoState.STAGED)

                site = await asyncio.to_thread(
                    self.resolver.resolve, staged.extract_dir, title=template.title
                )
                run.advance(DemoState.RESOLVED)

                demo_url = await self._publish(site.deploy_dir, run.demo_id, run.demo_id)
                run.advance(DemoState.PUBLISHED)

                await self._record(template.id, demo_url, run.demo_id)
                run.advance(DemoState.RECORDED)

            run.advance(DemoState.DONE)
            return demo_url
        except DemoError as exc:
            exc.template_id = exc.template_id or template_id
            run.fail(exc.stage, str(exc))
            raise
        except TemplateNotFoundError as exc:
            run.fail("authorization", str(exc))
            raise

    async def publish_uploaded_site(
        self, template_id: str, principal: Principal, upload: AsyncReadable
    ) -> str:
        """Publish a site archive sent directly by the client.

        Uses the looser single-subfolder scan; the subfolder name is kept
        in the published URL.
        """
        run = DemoRun(template_id=template_id)
        try:
            template = await self._authorize(template_id, principal)
            run.demo_id = new_demo_id(template.id)
            run.advance(DemoState.AUTHORIZED)

            async with AsyncExitStack() as scratch:
                staged = await self.materializer.stage_upload(upload, run.demo_id)
                scratch.push_async_callback(self.materializer.release, staged)
                run.advance(DemoState.STAGED)

                site = await asyncio.to_thread(self.resolver.find_site_subdirectory, staged.extract_dir)
                run.advance(DemoState.RESOLVED)

                prefix = f"{run.demo_id}/{site.subpath}" if site.subpath else run.demo_id
                demo_url = await self._publish(site.deploy_dir, prefix, run.demo_id)
                run.advance(DemoState.PUBLISHED)

                await self._record(template.id, demo_url, run.demo_id)
                run.advance(DemoState.RECORDED)

            run.advance(DemoState.DONE)
            return demo_url
        except DemoError as exc:
            exc.template_id = exc.template_id or template_id
            run.fail(exc.stage, str(exc))
            raise
        except TemplateNotFoundError as exc:
            run.fail("authorization", str(exc))
            raise

    async def remove_demo(self, template_id: str, principal: Principal) -> None:
        """Delete the published demo; a template without one is left untouched."""
        template = await self._authorize(template_id, principal)
        if not template.has_live_demo or not template.demo_deployment_id:
            logger.info("Template %s has no live demo, nothing to remove", template_id)
            return

        deployment_id = template.demo_deployment_id
        try:
            deleted = await self.storage.delete_tree(deployment_id)
        except StorageError as exc:
            raise RemovalError(str(exc), template_id=template_id) from exc

        try:
            await self.templates.clear_demo(template.id)
        except (SQLAlchemyError, TemplateError) as exc:
            raise PersistenceError(
                f"demo files removed but template could not be updated: {exc}",
                template_id=template_id,
                demo_id=deployment_id,
            ) from exc
        logger.info("Removed demo %s (%d object(s)) for template %s", deployment_id, deleted, template_id)

    async def get_demo_details(self, template_id: str) -> DemoDetails:
        template = await self.templates.get_template(template_id)
        if template.has_live_demo and template.demo_url:
            return DemoDetails(has_demo=True, demo_url=template.demo_url)
        return DemoDetails(has_demo=False)

    async def _authorize(self, template_id: str, principal: Principal) -> Template:
        template = await self.templates.get_template(template_id)
        if not (principal.is_admin or template.is_owned_by(principal.account_id)):
            raise DemoForbiddenError(
                "not allowed to manage the demo of this template", template_id=template_id
            )
        return template

    async def _publish(self, deploy_dir: Path, prefix: str, demo_id: str) -> str:
        try:
            demo_url = await asyncio.wait_for(
                self.storage.upload_tree(deploy_dir, prefix), timeout=self.upload_timeout
            )
        except (StorageError, asyncio.TimeoutError) as exc:
            await self._discard_partial_upload(demo_id)
            raise UploadError(f"publishing {prefix} failed: {exc}") from exc

        if self.invalidator is not None:
            try:
                await self.invalidator.invalidate([f"/{demo_id}/*"])
            except StorageError as exc:
                logger.warning("Cache invalidation for %s failed: %s", demo_id, exc)
        return demo_url

    async def _discard_partial_upload(self, demo_id: str) -> None:
        try:
            await self.storage.delete_tree(demo_id)
        except StorageError as exc:
            logger.warning("Could not remove partial upload %s: %s", demo_id, exc)

    async def _record(self, template_id: str, demo_url: str, demo_id: str) -> None:
        try:
            await self.templates.apply_demo(template_id, demo_url=demo_url, deployment_id=demo_id)
        except (SQLAlchemyError, TemplateError) as exc:
            logger.error("Demo %s is published but unreferenced: %s", demo_id, exc)
            raise PersistenceError(
                f"demo published but template could not be updated: {exc}",
                template_id=template_id,
                demo_id=demo_id,
            ) from exc
