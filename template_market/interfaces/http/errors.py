"""Translate demo pipeline failures into HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from template_market.modules.demos import (
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

logger = logging.getLogger(__name__)

DEMO_ERROR_STATUS = {
    DemoForbiddenError: status.HTTP_403_FORBIDDEN,
    MissingArchiveError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UnrecognizedStructureError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DownloadError: status.HTTP_502_BAD_GATEWAY,
    ExtractError: status.HTTP_502_BAD_GATEWAY,
    UploadError: status.HTTP_502_BAD_GATEWAY,
    RemovalError: status.HTTP_502_BAD_GATEWAY,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: DemoError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in DEMO_ERROR_STATUS:
            return DEMO_ERROR_STATUS[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def demo_error_handler(request: Request, exc: DemoError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.warning("%s %s failed at %s: %s", request.method, request.url.path, exc.stage, exc)
    return JSONResponse(
        status_code=code,
        content={
            "detail": exc.guidance,
            "stage": exc.stage,
            "error": str(exc),
            "retryable": exc.retryable,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DemoError, demo_error_handler)


__all__ = ["DEMO_ERROR_STATUS", "demo_error_handler", "register_error_handlers", "status_for"]
