"""
FastAPI application entry point.

Using an application factory (create_app) so tests can build an app with
their own settings and dependency overrides.

For local development:
    uvicorn mux_storage.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .adapter import MuxStorage
from .api.dependencies import get_storage
from .api.routes import health, media
from .config.settings import get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log start-up configuration and shutdown."""
    settings = get_settings()

    logger.info(
        "Mux storage API starting",
        extra={
            "version": __version__,
            "encoding_tier": settings.encoding_tier,
            "resolve_attempts": settings.asset_resolve_attempts,
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        # Storage endpoints answer 503 until these are set.
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("Mux storage API shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Write-only media storage backed by Mux Video.

        - `POST /api/v1/media` stores a file and returns a reference URL.
          Videos are uploaded to Mux and referenced by manifest; other files
          are treated as thumbnails of an existing asset.
        - `/content/...` never serves anything.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        media.router,
        prefix="/api/v1/media",
        tags=["Media"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "Mux Storage API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    @app.get("/content/{path:path}", include_in_schema=False)
    async def content(path: str, request: Request, storage: MuxStorage = Depends(get_storage)):
        """Stored content is not retrievable; delegate to the adapter's handler."""
        handler = storage.serve()
        return await handler(request)

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Log the full error server-side but return a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error."}
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "mux_storage.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
