from fastapi import APIRouter

from template_market.interfaces.http.routers import admin, auth, templates, uploads


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(auth.router, prefix="/auth", tags=["auth"])
    router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
    router.include_router(templates.router, prefix="/templates", tags=["templates"])
    router.include_router(admin.router, prefix="/admin", tags=["admin"])
    return router


__all__ = [
    "create_api_router",
]
