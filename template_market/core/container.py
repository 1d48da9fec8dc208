"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from template_market.core.config import Settings, get_settings
from template_market.infrastructure.database.session import get_engine
from template_market.infrastructure.storage import CacheInvalidator, CloudFrontInvalidator, ObjectStorage


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    archive_storage: ObjectStorage
    demo_storage: ObjectStorage
    invalidator: Optional[CacheInvalidator] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApplicationContainer":
        storage = settings.storage
        return cls(
            settings=settings,
            archive_storage=ObjectStorage.for_bucket(
                storage, storage.archive_bucket, storage.archive_public_base_url
            ),
            demo_storage=ObjectStorage.for_bucket(storage, storage.demo_bucket, storage.demo_public_base_url),
            invalidator=CloudFrontInvalidator.from_settings(storage),
        )

    def init_infrastructure(self) -> None:
        """Ensure infrastructure singletons (database engine, scratch space) are initialised."""
        get_engine()
        self.settings.demo.scratch_dir.mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_container() -> ApplicationContainer:
    container = ApplicationContainer.from_settings(get_settings())
    container.init_infrastructure()
    return container


__all__ = ["ApplicationContainer", "get_container"]
