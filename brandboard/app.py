"""
FastAPI application entry point for the branding board.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from brandboard.config import Settings, get_settings
from brandboard.errors import BrandingError
from brandboard.routes import router

logger = logging.getLogger(__name__)


async def branding_error_handler(request: Request, exc: BrandingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def uses_local_uploads(settings: Settings) -> bool:
    return not settings.use_in_memory_backends and not settings.s3_bucket


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    app = FastAPI(title="Branding Board", version="0.1.0")
    app.add_exception_handler(BrandingError, branding_error_handler)
    app.include_router(router, prefix=settings.api_prefix)

    # Logos saved by LocalStorageClient are referenced as {upload_url_prefix}/<name>.
    if uses_local_uploads(settings):
        os.makedirs(settings.upload_dir, exist_ok=True)
        app.mount(
            settings.upload_url_prefix.rstrip("/"),
            StaticFiles(directory=settings.upload_dir),
            name="uploads",
        )
    return app


app = create_app()
