# src/mediafeed/main.py
"""Main entry point for the media feed application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mediafeed.api.v1 import account_router, feeds_router, posts_router
from mediafeed.core.errors import DataIntegrityError, InternalError, MediaFeedError
from mediafeed.core.settings import settings
from mediafeed.db.session import create_tables
from mediafeed.repositories.object_store import LocalObjectStore

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Media uploads, posts, comments, likes and ranked feeds",
    version=settings.app_version,
)

# Include API routers
app.include_router(account_router, prefix="/api/v1")
app.include_router(feeds_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")


@app.exception_handler(MediaFeedError)
async def media_feed_error_handler(request: Request, exc: MediaFeedError) -> JSONResponse:
    """Render core errors as structured JSON with their status code."""
    if isinstance(exc, DataIntegrityError | InternalError):
        logger.error(
            "%s on %s %s: %s %s",
            exc.code,
            request.method,
            request.url.path,
            exc.message,
            exc.context,
            exc_info=exc,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.code},
    )


@app.on_event("startup")
async def on_startup() -> None:
    if settings.auto_create_tables:
        create_tables()
    app.state.object_store = LocalObjectStore(
        settings.media_root,
        settings.media_container,
        settings.cdn_base_url,
    )
    logger.info("Media stored under %s/%s", settings.media_root, settings.media_container)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    app.state.object_store = None


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("mediafeed.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
