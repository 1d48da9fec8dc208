"""Tests for staging archives into scratch space."""

import io
import threading
import zipfile

import pytest

from template_market.modules.demos import (
    ArchiveMaterializer,
    DownloadError,
    ExtractError,
    UnsafeArchiveError,
    extract_archive,
)
from tests.conftest import AsyncBytes, build_zip


def _zip_with_member(name: str) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr(zipfile.ZipInfo(name), "evil")
    return buffer.getvalue()


@pytest.fixture
def materializer(archive_storage, scratch_dir):
    return ArchiveMaterializer(archive_storage, scratch_dir, download_timeout=5, extract_timeout=5)


class TestExtractArchive:
    def test_skips_macos_metadata(self, tmp_path):
        zip_path = tmp_path / "site.zip"
        zip_path.write_bytes(build_zip({"index.html": "<p>hi</p>", "__MACOSX/._index.html": "junk"}))

        count = extract_archive(zip_path, tmp_path / "out")

        assert count == 1
        assert (tmp_path / "out" / "index.html").is_file()
        assert not (tmp_path / "out" / "__MACOSX").exists()

    @pytest.mark.parametrize("name", ["../evil.txt", "/etc/evil.txt", "C:/evil.txt", "a/../../evil.txt"])
    def test_rejects_escaping_members(self, tmp_path, name):
        zip_path = tmp_path / "bad.zip"
        zip_path.write_bytes(_zip_with_member(name))

        with pytest.raises(UnsafeArchiveError):
            extract_archive(zip_path, tmp_path / "out")
        assert not (tmp_path / "evil.txt").exists()

    def test_colon_inside_a_name_is_allowed(self, tmp_path):
        zip_path = tmp_path / "site.zip"
        zip_path.write_bytes(build_zip({"index.html": "hi", "notes/v1:draft.txt": "x"}))

        assert extract_archive(zip_path, tmp_path / "out") == 2
        assert (tmp_path / "out" / "notes" / "v1:draft.txt").read_text() == "x"

    def test_cancelled_extraction_writes_nothing(self, tmp_path):
        zip_path = tmp_path / "site.zip"
        zip_path.write_bytes(build_zip({"index.html": "hi", "app.js": "x"}))
        cancel = threading.Event()
        cancel.set()

        assert extract_archive(zip_path, tmp_path / "out", cancel) == 0
        assert list((tmp_path / "out").iterdir()) == []


class TestStage:
    @pytest.mark.asyncio
    async def test_stage_downloads_and_extracts(self, materializer, fake_s3):
        fake_s3.seed("archives", "archives/site.zip", build_zip({"dist/index.html": "ok"}))

        staged = await materializer.stage("archives/site.zip", "demo-a")

        assert staged.zip_path.is_file()
        assert (staged.extract_dir / "dist" / "index.html").read_text() == "ok"

        await materializer.release(staged)
        assert not staged.zip_path.exists()
        assert not staged.extract_dir.exists()

    @pytest.mark.asyncio
    async def test_missing_archive_is_download_error(self, materializer, scratch_dir):
        with pytest.raises(DownloadError) as excinfo:
            await materializer.stage("archives/nope.zip", "demo-b")
        assert excinfo.value.retryable
        assert not (scratch_dir / "demo-b").exists()
        assert not (scratch_dir / "demo-b.zip").exists()

    @pytest.mark.asyncio
    async def test_corrupt_archive_is_extract_error_and_cleaned(self, materializer, fake_s3, scratch_dir):
        fake_s3.seed("archives", "archives/broken.zip", b"this is not a zip")

        with pytest.raises(ExtractError):
            await materializer.stage("archives/broken.zip", "demo-c")
        assert not (scratch_dir / "demo-c.zip").exists()
        assert not (scratch_dir / "demo-c").exists()

    @pytest.mark.asyncio
    async def test_zip_slip_is_extract_error(self, materializer, fake_s3):
        fake_s3.seed("archives", "archives/slip.zip", _zip_with_member("../outside.txt"))
        with pytest.raises(ExtractError):
            await materializer.stage("archives/slip.zip", "demo-d")

    @pytest.mark.asyncio
    async def test_release_twice_is_harmless(self, materializer):
        staged = materializer.paths_for("demo-e")
        await materializer.release(staged)
        await materializer.release(staged)


class TestStageUpload:
    @pytest.mark.asyncio
    async def test_stage_upload_extracts(self, materializer):
        staged = await materializer.stage_upload(AsyncBytes(build_zip({"site/index.html": "hi"})), "demo-f")
        assert (staged.extract_dir / "site" / "index.html").is_file()
        await materializer.release(staged)

    @pytest.mark.asyncio
    async def test_empty_upload_is_rejected(self, materializer, scratch_dir):
        with pytest.raises(ExtractError):
            await materializer.stage_upload(AsyncBytes(b""), "demo-g")
        assert not (scratch_dir / "demo-g.zip").exists()
