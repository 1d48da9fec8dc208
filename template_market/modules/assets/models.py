"""Domain models for uploaded template assets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

ARCHIVES_FOLDER = "archives"
IMAGES_FOLDER = "images"


@dataclass(frozen=True, slots=True)
class StoredAsset:
    key: str
    url: str
    content_type: Optional[str]
    size_bytes: int
    checksum_sha256: str
