"""Async gateway over an S3-compatible bucket."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path
from typing import Any, AsyncContextManager, Callable, Optional
from urllib.parse import quote, unquote, urlparse

import aioboto3
import aiofiles
import aiohttp
from botocore.exceptions import BotoCoreError, ClientError

from template_market.core.config import StorageSettings

from .exceptions import ObjectNotFoundError, TransferError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], AsyncContextManager[Any]]

CHUNK_SIZE = 1024 * 1024
DELETE_BATCH_SIZE = 1000
DEFAULT_CONTENT_TYPE = "application/octet-stream"
CONTENT_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
}
_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


def content_type_for(path: str | Path) -> str:
    return CONTENT_TYPES.get(Path(path).suffix.lower(), DEFAULT_CONTENT_TYPE)


def list_files(root: Path) -> list[Path]:
    """Every regular file below ``root``, depth first, in a stable order."""
    files: list[Path] = []
    stack = [root]
    while stack:
        current = stack.pop()
        for entry in current.iterdir():
            if entry.is_symlink():
                continue
            if entry.is_dir():
                stack.append(entry)
            elif entry.is_file():
                files.append(entry)
    return sorted(files, key=lambda path: path.relative_to(root).as_posix())


def _discard_partial_file(path: Path) -> None:
    with contextlib.suppress(OSError):
        path.unlink(missing_ok=True)


def archive_key_from_reference(reference: str) -> str:
    """Accept either a full object URL or a bare key."""
    parsed = urlparse(reference)
    if parsed.scheme in {"http", "https"}:
        return unquote(parsed.path.lstrip("/"))
    return reference.lstrip("/")


def build_client_factory(settings: StorageSettings, service: str = "s3") -> ClientFactory:
    session = aioboto3.Session(
        aws_access_key_id=settings.access_key_id,
        aws_secret_access_key=settings.secret_access_key,
        region_name=settings.region,
    )

    def factory() -> AsyncContextManager[Any]:
        if service == "s3":
            return session.client("s3", endpoint_url=settings.endpoint_url)
        return session.client(service)

    return factory


class ObjectStorage:
    """put/get/list/delete by key for a single bucket."""

    def __init__(
        self,
        bucket: str,
        client_factory: ClientFactory,
        *,
        region: Optional[str] = None,
        public_base_url: Optional[str] = None,
    ) -> None:
        self.bucket = bucket
        self._client_factory = client_factory
        self._region = region
        self._public_base_url = public_base_url

    @classmethod
    def for_bucket(
        cls, settings: StorageSettings, bucket: str, public_base_url: Optional[str] = None
    ) -> "ObjectStorage":
        return cls(
            bucket,
            build_client_factory(settings),
            region=settings.region,
            public_base_url=public_base_url,
        )

    @property
    def base_url(self) -> str:
        if self._public_base_url:
            return self._public_base_url.rstrip("/")
        if self._region:
            return f"https://{self.bucket}.s3.{self._region}.amazonaws.com"
        return f"https://{self.bucket}.s3.amazonaws.com"

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/{quote(key.lstrip('/'), safe='/')}"

    async def put(self, data: bytes, key: str, content_type: Optional[str] = None) -> str:
        try:
            async with self._client_factory() as client:
                await client.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=data,
                    ContentType=content_type or content_type_for(key),
                )
        except (ClientError, BotoCoreError) as exc:
            raise TransferError(f"upload of {key} failed: {exc}") from exc
        return self.public_url(key)

    async def get(self, key: str, local_path: str | Path) -> Path:
        """Stream ``key`` into ``local_path`` chunk by chunk."""
        target = Path(local_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            async with self._client_factory() as client:
                response = await client.get_object(Bucket=self.bucket, Key=key)
                body = response["Body"]
                try:
                    async with aiofiles.open(target, "wb") as out:
                        while True:
                            chunk = await body.read(CHUNK_SIZE)
                            if not chunk:
                                break
                            await out.write(chunk)
                finally:
                    body.close()
        except ClientError as exc:
            _discard_partial_file(target)
            if _error_code(exc) in _MISSING_KEY_CODES:
                raise ObjectNotFoundError(self.bucket, key) from exc
            raise TransferError(f"download of {key} failed: {exc}") from exc
        except (BotoCoreError, aiohttp.ClientError, asyncio.IncompleteReadError, OSError) as exc:
            # aiobotocore streams the body through aiohttp
            _discard_partial_file(target)
            raise TransferError(f"download of {key} failed: {exc}") from exc
        return target

    async def upload_tree(self, local_dir: str | Path, prefix: str) -> str:
        """Upload every file under ``local_dir`` below ``prefix``.

        Returns the public URL of ``<prefix>/index.html``.
        """
        root = Path(local_dir)
        prefix = prefix.strip("/")
        try:
            files = await asyncio.to_thread(list_files, root)
            async with self._client_factory() as client:
                for path in files:
                    relative = path.relative_to(root).as_posix()
                    key = f"{prefix}/{relative}" if prefix else relative
                    async with aiofiles.open(path, "rb") as handle:
                        data = await handle.read()
                    await client.put_object(
                        Bucket=self.bucket,
                        Key=key,
                        Body=data,
                        ContentType=content_type_for(path),
                    )
        except (ClientError, BotoCoreError, aiohttp.ClientError, OSError) as exc:
            raise TransferError(f"upload under {prefix}/ failed: {exc}") from exc
        logger.info("Uploaded %d file(s) to s3://%s/%s", len(files), self.bucket, prefix)
        return self.public_url(f"{prefix}/index.html" if prefix else "index.html")

    async def list_objects(self, prefix: str) -> list[str]:
        keys: list[str] = []
        try:
            async with self._client_factory() as client:
                token: Optional[str] = None
                while True:
                    params: dict[str, Any] = {"Bucket": self.bucket, "Prefix": prefix}
                    if token:
                        params["ContinuationToken"] = token
                    response = await client.list_objects_v2(**params)
                    keys.extend(item["Key"] for item in response.get("Contents", []) if item.get("Key"))
                    token = response.get("NextContinuationToken")
                    if not token:
                        break
        except (ClientError, BotoCoreError) as exc:
            raise TransferError(f"listing of {prefix} failed: {exc}") from exc
        return keys

    async def delete_tree(self, prefix: str) -> int:
        """Delete every object under ``prefix/``; returns the number removed."""
        directory = prefix.strip("/") + "/"
        keys = await self.list_objects(directory)
        if not keys:
            return 0
        try:
            async with self._client_factory() as client:
                for start in range(0, len(keys), DELETE_BATCH_SIZE):
                    batch = keys[start : start + DELETE_BATCH_SIZE]
                    response = await client.delete_objects(
                        Bucket=self.bucket,
                        Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                    )
                    errors = response.get("Errors") or []
                    if errors:
                        raise TransferError(
                            f"{len(errors)} object(s) under {directory} could not be deleted: "
                            f"{errors[0].get('Key')} ({errors[0].get('Code')})"
                        )
        except (ClientError, BotoCoreError) as exc:
            raise TransferError(f"delete under {directory} failed: {exc}") from exc
        logger.info("Deleted %d object(s) under s3://%s/%s", len(keys), self.bucket, directory)
        return len(keys)

    async def delete(self, key: str) -> None:
        try:
            async with self._client_factory() as client:
                await client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise TransferError(f"delete of {key} failed: {exc}") from exc


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


__all__ = [
    "CONTENT_TYPES",
    "DEFAULT_CONTENT_TYPE",
    "ClientFactory",
    "ObjectStorage",
    "archive_key_from_reference",
    "build_client_factory",
    "content_type_for",
    "list_files",
]
