"""Live demo generation for marketplace templates."""

from .exceptions import (
    DemoError,
    DemoForbiddenError,
    DownloadError,
    ExtractError,
    MissingArchiveError,
    PersistenceError,
    RemovalError,
    UnrecognizedStructureError,
    UploadError,
)
from .materializer import ArchiveMaterializer, UnsafeArchiveError, extract_archive
from .models import DemoDetails, DemoRun, DemoState, ResolvedSite, SiteSubdirectory, StagedArchive, new_demo_id
from .resolver import SiteStructureResolver
from .service import DemoService

__all__ = [
    "ArchiveMaterializer",
    "DemoDetails",
    "DemoError",
    "DemoForbiddenError",
    "DemoRun",
    "DemoService",
    "DemoState",
    "DownloadError",
    "ExtractError",
    "MissingArchiveError",
    "PersistenceError",
    "RemovalError",
    "ResolvedSite",
    "SiteStructureResolver",
    "SiteSubdirectory",
    "StagedArchive",
    "UnrecognizedStructureError",
    "UnsafeArchiveError",
    "UploadError",
    "extract_archive",
    "new_demo_id",
]
