"""Object storage errors."""


class StorageError(Exception):
    """Base class for object storage failures."""


class ObjectNotFoundError(StorageError):
    """Raised when the requested key does not exist in the bucket."""

    def __init__(self, bucket: str, key: str) -> None:
        super().__init__(f"object not found: s3://{bucket}/{key}")
        self.bucket = bucket
        self.key = key


class TransferError(StorageError):
    """Raised when an upload, download, listing or delete call fails."""
