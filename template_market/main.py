import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from template_market import __version__
from template_market.core.config import get_settings
from template_market.core.container import get_container
from template_market.core.logging import configure_logging
from template_market.infrastructure.database import dispose_engine, init_db
from template_market.interfaces.http import create_api_router
from template_market.interfaces.http.errors import register_error_handlers

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    get_container()
    await init_db()
    logger.info("%s %s started", settings.project_name, __version__)
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.project_name,
        description="Template marketplace with live demo publishing",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/healthz", tags=["health"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
