"""Stage template archives into private scratch directories."""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
import threading
import zipfile
from pathlib import Path, PurePosixPath
from typing import Optional, Protocol

import aiofiles

from template_market.infrastructure.storage import ObjectNotFoundError, ObjectStorage, StorageError

from .exceptions import DownloadError, ExtractError
from .models import StagedArchive

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
_IGNORED_PREFIXES = ("__MACOSX/",)
_DRIVE_LETTER = re.compile(r"^[A-Za-z]:")


class UnsafeArchiveError(ValueError):
    """Raised for members that would land outside the extraction directory."""


class AsyncReadable(Protocol):
    async def read(self, size: int = -1) -> bytes:
        ...


def _is_bad_member(name: str) -> bool:
    if not name or not name.strip():
        return True
    if name.startswith(("/", "\\")):
        return True
    if _DRIVE_LETTER.match(name):
        return True
    return ".." in PurePosixPath(name.replace("\\", "/")).parts


def _cancelled(cancel: Optional[threading.Event]) -> bool:
    return cancel is not None and cancel.is_set()


def extract_archive(zip_path: Path, dest: Path, cancel: Optional[threading.Event] = None) -> int:
    """Extract ``zip_path`` into ``dest``; returns the number of files written.

    ``cancel`` is checked between members and between chunks of a member, so a
    caller that sets it gets the thread back after at most one chunk.
    """
    dest.mkdir(parents=True, exist_ok=True)
    root = dest.resolve()
    written = 0
    with zipfile.ZipFile(zip_path) as archive:
        members: list[tuple[zipfile.ZipInfo, Path]] = []
        for info in archive.infolist():
            if info.filename.startswith(_IGNORED_PREFIXES):
                continue
            if _is_bad_member(info.filename):
                raise UnsafeArchiveError(f"unsafe path in archive: {info.filename!r}")
            target = (root / info.filename).resolve()
            if target != root and root not in target.parents:
                raise UnsafeArchiveError(f"unsafe path in archive: {info.filename!r}")
            members.append((info, target))
        for info, target in members:
            if _cancelled(cancel):
                break
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            with archive.open(info) as source, open(target, "wb") as out:
                while not _cancelled(cancel):
                    chunk = source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    out.write(chunk)
            written += 1
    return written


class ArchiveMaterializer:
    """Download + extract an archive under ``scratch_root/<work_id>``."""

    def __init__(
        self,
        storage: ObjectStorage,
        scratch_root: Path,
        *,
        download_timeout: Optional[float] = None,
        extract_timeout: Optional[float] = None,
    ) -> None:
        self._storage = storage
        self._scratch_root = Path(scratch_root)
        self._download_timeout = download_timeout
        self._extract_timeout = extract_timeout

    def paths_for(self, work_id: str) -> StagedArchive:
        return StagedArchive(
            work_id=work_id,
            zip_path=self._scratch_root / f"{work_id}.zip",
            extract_dir=self._scratch_root / work_id,
        )

    async def stage(self, archive_key: str, work_id: str) -> StagedArchive:
        staged = self.paths_for(work_id)
        try:
            await self._download(archive_key, staged)
            await self._extract(staged)
        except BaseException:
            await self.release(staged)
            raise
        return staged

    async def stage_upload(self, source: AsyncReadable, work_id: str) -> StagedArchive:
        """Stage an archive received directly from a client."""
        staged = self.paths_for(work_id)
        try:
            staged.zip_path.parent.mkdir(parents=True, exist_ok=True)
            total = 0
            async with aiofiles.open(staged.zip_path, "wb") as out:
                while True:
                    chunk = await source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    await out.write(chunk)
                    total += len(chunk)
            if total == 0:
                raise ExtractError("uploaded archive is empty")
            await self._extract(staged)
        except OSError as exc:
            await self.release(staged)
            raise ExtractError(f"could not store uploaded archive: {exc}") from exc
        except BaseException:
            await self.release(staged)
            raise
        return staged

    async def release(self, staged: StagedArchive) -> None:
        """Remove scratch paths; problems are logged, never raised."""
        try:
            await asyncio.to_thread(_remove_paths, staged)
        except Exception as exc:
            logger.warning("Failed to clean up scratch for %s: %s", staged.work_id, exc)

    async def _download(self, archive_key: str, staged: StagedArchive) -> None:
        try:
            await asyncio.wait_for(
                self._storage.get(archive_key, staged.zip_path),
                timeout=self._download_timeout,
            )
        except ObjectNotFoundError as exc:
            raise DownloadError(f"archive {archive_key} does not exist") from exc
        except StorageError as exc:
            raise DownloadError(str(exc)) from exc
        except asyncio.TimeoutError as exc:
            raise DownloadError(f"download of {archive_key} timed out") from exc
        logger.info("Downloaded %s to %s", archive_key, staged.zip_path)

    async def _extract(self, staged: StagedArchive) -> None:
        cancel = threading.Event()
        worker = asyncio.ensure_future(
            asyncio.to_thread(extract_archive, staged.zip_path, staged.extract_dir, cancel)
        )
        try:
            done, _ = await asyncio.wait({worker}, timeout=self._extract_timeout)
        finally:
            if not worker.done():
                cancel.set()
        if not done:
            # the thread must be idle before release() removes its directory
            await asyncio.gather(worker, return_exceptions=True)
            raise ExtractError(f"extraction of {staged.zip_path.name} timed out")
        try:
            count = worker.result()
        except (zipfile.BadZipFile, zipfile.LargeZipFile, UnsafeArchiveError, OSError) as exc:
            raise ExtractError(f"could not extract {staged.zip_path.name}: {exc}") from exc
        logger.info("Extracted %d file(s) into %s", count, staged.extract_dir)


def _remove_paths(staged: StagedArchive) -> None:
    staged.zip_path.unlink(missing_ok=True)
    if staged.extract_dir.exists():
        shutil.rmtree(staged.extract_dir)
