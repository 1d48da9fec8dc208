"""Template asset service streaming uploads into object storage."""

from __future__ import annotations

import hashlib
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from template_market.core.container import ApplicationContainer
from template_market.infrastructure.storage import ObjectStorage

from .exceptions import EmptyUploadError, UnsupportedAssetError
from .models import ARCHIVES_FOLDER, IMAGES_FOLDER, StoredAsset

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
IMAGE_SUFFIXES = frozenset({".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp"})


@dataclass(slots=True)
class TemplateAssetService:
    storage: ObjectStorage

    @classmethod
    def from_container(cls, container: ApplicationContainer) -> "TemplateAssetService":
        return cls(container.archive_storage)

    async def store_upload(self, owner_id: str, upload: UploadFile, folder: str) -> StoredAsset:
        file_name = _sanitize_filename(upload.filename) or "asset"
        suffix = Path(file_name).suffix.lower()
        if folder == ARCHIVES_FOLDER and suffix != ".zip":
            raise UnsupportedAssetError("only .zip archives are accepted")
        if folder == IMAGES_FOLDER and suffix not in IMAGE_SUFFIXES:
            raise UnsupportedAssetError(f"unsupported image type: {suffix or 'none'}")

        hasher = hashlib.sha256()
        buffer = bytearray()
        try:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                buffer.extend(chunk)
                hasher.update(chunk)
        finally:
            await upload.close()

        if not buffer:
            raise EmptyUploadError("uploaded file is empty")

        key = f"{folder}/{int(time.time() * 1000)}-{file_name}"
        url = await self.storage.put(bytes(buffer), key, upload.content_type)
        logger.info("Stored %s (%d bytes) for account %s", key, len(buffer), owner_id)
        return StoredAsset(
            key=key,
            url=url,
            content_type=upload.content_type,
            size_bytes=len(buffer),
            checksum_sha256=hasher.hexdigest(),
        )


def _sanitize_filename(filename: str | None) -> str | None:
    if not filename:
        return None
    name = os.path.basename(filename.replace("\\", "/"))
    return name.replace("\0", "").strip().replace(" ", "_")
