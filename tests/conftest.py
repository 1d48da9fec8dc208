"""Shared fixtures: an in-memory S3 double, a SQLite database per test and zip builders."""

from __future__ import annotations

import asyncio
import io
import zipfile
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

import pytest
import pytest_asyncio
from botocore.exceptions import ClientError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from template_market.core.config import DemoSettings, Settings
from template_market.core.container import ApplicationContainer
from template_market.db import models  # noqa: F401
from template_market.infrastructure.database.base import Base
from template_market.infrastructure.storage import ObjectStorage
from template_market.modules.accounts import Principal
from template_market.modules.templates import Template, TemplateStatus

OWNER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_ID = "22222222-2222-2222-2222-222222222222"
ADMIN_ID = "33333333-3333-3333-3333-333333333333"
TEMPLATE_ID = "44444444-4444-4444-4444-444444444444"


# =============================================================================
# Object storage double
# =============================================================================


class FakeBody:
    def __init__(self, data: bytes, error: Optional[BaseException] = None) -> None:
        self._stream = io.BytesIO(data)
        self._error = error
        self.closed = False

    async def read(self, size: int = -1) -> bytes:
        if self._error is not None:
            raise self._error
        return self._stream.read(size)

    def close(self) -> None:
        self.closed = True


class FakeS3:
    """Just enough of the aioboto3 S3 client surface, backed by dicts.

    ``page_size`` keeps listings small so pagination is exercised.
    ``fail_puts_after`` makes every ``put_object`` after the n-th one fail.
    ``delay`` stalls each transfer call; ``body_error`` is raised from body reads.
    """

    def __init__(self, page_size: int = 1000) -> None:
        self.buckets: dict[str, dict[str, dict[str, Any]]] = {}
        self.page_size = page_size
        self.fail_puts_after: Optional[int] = None
        self.delete_errors: list[dict[str, str]] = []
        self.calls: list[str] = []
        self.delay = 0.0
        self.body_error: Optional[BaseException] = None
        self._puts = 0

    async def __aenter__(self) -> "FakeS3":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    def objects(self, bucket: str) -> dict[str, dict[str, Any]]:
        return self.buckets.setdefault(bucket, {})

    def seed(self, bucket: str, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        self.objects(bucket)[key] = {"Body": data, "ContentType": content_type}

    async def put_object(self, *, Bucket: str, Key: str, Body: bytes, ContentType: Optional[str] = None) -> dict:
        self.calls.append("put_object")
        await asyncio.sleep(self.delay)
        self._puts += 1
        if self.fail_puts_after is not None and self._puts > self.fail_puts_after:
            raise ClientError({"Error": {"Code": "InternalError", "Message": "boom"}}, "PutObject")
        self.seed(Bucket, Key, bytes(Body), ContentType or "application/octet-stream")
        return {}

    async def get_object(self, *, Bucket: str, Key: str) -> dict:
        self.calls.append("get_object")
        await asyncio.sleep(self.delay)
        stored = self.objects(Bucket).get(Key)
        if stored is None:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        return {"Body": FakeBody(stored["Body"], self.body_error), "ContentType": stored["ContentType"]}

    async def list_objects_v2(
        self, *, Bucket: str, Prefix: str = "", ContinuationToken: Optional[str] = None
    ) -> dict:
        self.calls.append("list_objects_v2")
        keys = sorted(key for key in self.objects(Bucket) if key.startswith(Prefix))
        start = int(ContinuationToken) if ContinuationToken else 0
        page = keys[start : start + self.page_size]
        response: dict[str, Any] = {"KeyCount": len(page)}
        if page:
            response["Contents"] = [{"Key": key} for key in page]
        if start + self.page_size < len(keys):
            response["IsTruncated"] = True
            response["NextContinuationToken"] = str(start + self.page_size)
        return response

    async def delete_objects(self, *, Bucket: str, Delete: dict) -> dict:
        self.calls.append("delete_objects")
        if self.delete_errors:
            return {"Errors": list(self.delete_errors)}
        for item in Delete["Objects"]:
            self.objects(Bucket).pop(item["Key"], None)
        return {}

    async def delete_object(self, *, Bucket: str, Key: str) -> dict:
        self.calls.append("delete_object")
        self.objects(Bucket).pop(Key, None)
        return {}


@pytest.fixture
def fake_s3() -> FakeS3:
    return FakeS3()


@pytest.fixture
def archive_storage(fake_s3: FakeS3) -> ObjectStorage:
    return ObjectStorage("archives", lambda: fake_s3, public_base_url="https://archives.example.com")


@pytest.fixture
def demo_storage(fake_s3: FakeS3) -> ObjectStorage:
    return ObjectStorage("demos", lambda: fake_s3, public_base_url="https://demos.example.com")


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    return tmp_path / "scratch"


@pytest.fixture
def container(archive_storage, demo_storage, scratch_dir) -> ApplicationContainer:
    settings = Settings(demo=DemoSettings(scratch_dir=scratch_dir))
    return ApplicationContainer(
        settings=settings,
        archive_storage=archive_storage,
        demo_storage=demo_storage,
    )


# =============================================================================
# Archives
# =============================================================================


def build_zip(files: dict[str, str | bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


class AsyncBytes:
    """Async ``read(size)`` over in-memory bytes, like ``UploadFile``."""

    def __init__(self, data: bytes) -> None:
        self._stream = io.BytesIO(data)

    async def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)


# =============================================================================
# Database
# =============================================================================


@pytest_asyncio.fixture
async def session_factory(tmp_path: Path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as db:
        yield db


# =============================================================================
# Domain objects
# =============================================================================


@pytest.fixture
def owner() -> Principal:
    return Principal(account_id=OWNER_ID, role="user")


@pytest.fixture
def stranger() -> Principal:
    return Principal(account_id=OTHER_ID, role="user")


@pytest.fixture
def admin() -> Principal:
    return Principal(account_id=ADMIN_ID, role="admin")


def make_template(**overrides: Any) -> Template:
    values: dict[str, Any] = {
        "id": TEMPLATE_ID,
        "title": "Landing Page",
        "description": "A landing page",
        "tags": ["react"],
        "category": "marketing",
        "tech_stack": "react",
        "price": Decimal("19.00"),
        "preview_image_url": None,
        "download_url": "https://archives.example.com/archives/1700000000000-landing.zip",
        "is_premium": False,
        "status": TemplateStatus.PUBLISHED,
        "admin_comment": None,
        "created_by": OWNER_ID,
        "reviewed_by": None,
        "reviewed_at": None,
        "demo_url": None,
        "has_live_demo": False,
        "demo_deployment_id": None,
        "created_at": datetime(2026, 10, 1, tzinfo=timezone.utc),
        "updated_at": None,
    }
    values.update(overrides)
    return Template(**values)
