"""Template asset domain exports."""

from .exceptions import AssetError, EmptyUploadError, UnsupportedAssetError
from .models import ARCHIVES_FOLDER, IMAGES_FOLDER, StoredAsset
from .service import TemplateAssetService

__all__ = [
    "ARCHIVES_FOLDER",
    "IMAGES_FOLDER",
    "AssetError",
    "EmptyUploadError",
    "StoredAsset",
    "TemplateAssetService",
    "UnsupportedAssetError",
]
