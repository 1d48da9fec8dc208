"""Object storage infrastructure (S3 via aioboto3)."""

from .cdn import CacheInvalidator, CloudFrontInvalidator
from .exceptions import ObjectNotFoundError, StorageError, TransferError
from .s3 import (
    CONTENT_TYPES,
    DEFAULT_CONTENT_TYPE,
    ObjectStorage,
    archive_key_from_reference,
    content_type_for,
    list_files,
)

__all__ = [
    "CONTENT_TYPES",
    "DEFAULT_CONTENT_TYPE",
    "CacheInvalidator",
    "CloudFrontInvalidator",
    "ObjectNotFoundError",
    "ObjectStorage",
    "StorageError",
    "TransferError",
    "archive_key_from_reference",
    "content_type_for",
    "list_files",
]
