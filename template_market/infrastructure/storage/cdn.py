"""Optional CDN cache purge after a demo is published."""

from __future__ import annotations

import logging
import time
from typing import Protocol, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from template_market.core.config import StorageSettings

from .exceptions import TransferError
from .s3 import ClientFactory, build_client_factory

logger = logging.getLogger(__name__)


class CacheInvalidator(Protocol):
    async def invalidate(self, paths: Sequence[str]) -> None:
        ...


class CloudFrontInvalidator:
    def __init__(self, distribution_id: str, client_factory: ClientFactory) -> None:
        self.distribution_id = distribution_id
        self._client_factory = client_factory

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "CloudFrontInvalidator | None":
        if not settings.cloudfront_distribution_id:
            return None
        return cls(settings.cloudfront_distribution_id, build_client_factory(settings, "cloudfront"))

    async def invalidate(self, paths: Sequence[str]) -> None:
        items = list(paths)
        try:
            async with self._client_factory() as client:
                await client.create_invalidation(
                    DistributionId=self.distribution_id,
                    InvalidationBatch={
                        "CallerReference": str(time.time_ns()),
                        "Paths": {"Quantity": len(items), "Items": items},
                    },
                )
        except (ClientError, BotoCoreError) as exc:
            raise TransferError(f"invalidation of {items} failed: {exc}") from exc
        logger.info("Requested CloudFront invalidation for %s", ", ".join(items))
