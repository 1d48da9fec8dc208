"""Asset upload errors."""


class AssetError(Exception):
    """Base class for asset upload failures."""


class EmptyUploadError(AssetError):
    """The uploaded file had no content."""


class UnsupportedAssetError(AssetError):
    """The uploaded file type is not accepted for the target folder."""
