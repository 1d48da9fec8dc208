"""Demo pipeline errors, each tagged with the stage that failed."""

from __future__ import annotations

from typing import Optional


class DemoError(Exception):
    """Base class for demo pipeline failures."""

    stage = "demo"
    retryable = False
    guidance = "Demo generation failed."

    def __init__(self, message: str, *, template_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.template_id = template_id


class DemoForbiddenError(DemoError):
    stage = "authorization"
    guidance = "Only the template owner or an admin can manage its demo."


class MissingArchiveError(DemoError):
    stage = "authorization"
    guidance = "Upload a template package before requesting a demo."


class DownloadError(DemoError):
    stage = "download"
    retryable = True
    guidance = "The template package could not be downloaded. Try again later."


class ExtractError(DemoError):
    stage = "extract"
    retryable = True
    guidance = "The template package could not be unpacked. Re-upload a valid .zip archive."


class UnrecognizedStructureError(DemoError):
    stage = "resolve"
    guidance = (
        "No servable site was found. Re-upload a buildable package with an index.html "
        "at the root or inside build/ or dist/."
    )


class UploadError(DemoError):
    stage = "publish"
    retryable = True
    guidance = "Publishing the demo failed. Try again later."


class RemovalError(DemoError):
    stage = "remove"
    retryable = True
    guidance = "The demo files could not be removed. Try again later."


class PersistenceError(DemoError):
    """The demo was published but the template record could not be updated.

    ``demo_id`` names the storage prefix that is now unreferenced.
    """

    stage = "record"
    retryable = True
    guidance = "The demo was published but could not be saved. Contact an administrator."

    def __init__(self, message: str, *, template_id: Optional[str] = None, demo_id: Optional[str] = None) -> None:
        super().__init__(message, template_id=template_id)
        self.demo_id = demo_id
