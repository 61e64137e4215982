"""
FastAPI application factory for fileupload.

Creates and configures the FastAPI application with middleware, error
handlers, upload routers and static serving of the storage directory.
"""

import logging
import os
import uuid as uuid_lib
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

from fileupload.config import FileUploadSettings, get_settings
from fileupload.logging_config import request_id_ctx
from fileupload.storage import StorageService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Signal handling and graceful shutdown are left to the ASGI server.
    """
    settings: FileUploadSettings = app.state.settings
    logger.info(
        f"Storing uploads in {settings.storage_directory}, "
        f"served at {settings.uri_access_prefix or '(not served)'}"
    )
    yield
    logger.info("Shutting down fileupload API")


def create_app(settings: Optional[FileUploadSettings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    This factory function encapsulates:
    - App instantiation and StorageService construction
    - Middleware registration (CORS, security headers, error handlers)
    - Request ID tracking middleware
    - Router registration and the static mount

    Args:
        settings: Settings to use; defaults to the cached environment settings

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="fileupload API",
        description="Content-addressed file upload service",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.state.settings = settings
    app.state.storage = StorageService(
        settings.storage_defaults,
        directory_mode=settings.directory_mode,
        chunk_size=settings.chunk_size,
    )

    from fileupload.middleware import (
        add_security_headers,
        configure_cors,
        register_error_handlers,
    )

    add_security_headers(app, static_prefix=settings.uri_access_prefix, is_production=settings.is_production)
    configure_cors(app, settings.cors_origins)
    register_error_handlers(app)

    # Middleware to add request ID to all requests
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Add unique request ID for tracing and structured logging"""
        request_id = request.headers.get("X-Request-ID") or str(uuid_lib.uuid4())
        token = request_id_ctx.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response

    from fileupload.routes import health_router, upload_router

    app.include_router(health_router)
    app.include_router(upload_router)

    if settings.serve_static and settings.uri_access_prefix:
        os.makedirs(settings.storage_directory, mode=settings.directory_mode, exist_ok=True)
        app.mount(
            settings.uri_access_prefix,
            StaticFiles(directory=settings.storage_directory, check_dir=False),
            name="static",
        )

    return app
