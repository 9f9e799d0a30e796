"""
Spaces File API - FastAPI Application Entry Point.

Initializes the FastAPI application for the DigitalOcean Spaces file facade:

- Lifespan handler that configures logging, validates storage settings and
  builds the StorageClient/FileService pair used by every request
- CORS and request-logging middleware
- Exception handlers producing uniform ApiResponse error envelopes
- API router registration under /api/v1
- Root and health endpoints

Usage:
    # Run with uvicorn directly
    uvicorn spaces_api.main:app --host 0.0.0.0 --port 8080

    # Run as a module
    python -m spaces_api.main
"""

import logging
import time
import uuid

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import uvicorn

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from spaces_api import __app_name__, __version__
from spaces_api.api.v1 import api_router
from spaces_api.config import get_settings, get_storage_settings
from spaces_api.core.error_handlers import register_exception_handlers
from spaces_api.core.storage import StorageClient
from spaces_api.services.file_service import FileService
from spaces_api.utils.logger import add_log_context, setup_logging


logger = logging.getLogger(__name__)

# Status codes >= 400 are logged at warning level
HTTP_ERROR_THRESHOLD = 400

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build process-wide resources on startup.

    Storage settings are validated here; a missing or blank SPACES_* value
    aborts startup. The resulting FileService is stored on ``app.state`` and
    handed to handlers through the ``get_file_service`` dependency.
    """
    settings = get_settings()
    setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)

    logger.info("%s starting", settings.app_name)
    logger.info("Environment: %s", settings.app_env)

    storage_settings = get_storage_settings()
    storage = StorageClient(storage_settings)
    app.state.file_service = FileService(storage, storage_settings)

    logger.info(
        "Connected to bucket %s at %s",
        storage_settings.bucket_name,
        storage_settings.endpoint_url,
    )

    yield

    logger.info("%s shutdown complete", settings.app_name)


_settings = get_settings()

app = FastAPI(
    title="Spaces File API",
    description="REST API for storing and retrieving files in DigitalOcean Spaces",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=_settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Process-Time", "Content-Disposition"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next) -> Response:
    """Log each request with its duration and tag the response with tracing headers."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    ctx_logger = add_log_context(logger, request_id=request_id)
    start_time = time.perf_counter()

    ctx_logger.debug("Request started: %s %s", request.method, request.url.path)

    response = await call_next(request)

    process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
    response.headers["X-Process-Time"] = f"{process_time_ms}ms"
    response.headers["X-Request-ID"] = request_id

    log_level = logging.DEBUG if response.status_code < HTTP_ERROR_THRESHOLD else logging.WARNING
    ctx_logger.log(
        log_level,
        "Request completed: %s %s [Status: %s] [Time: %sms]",
        request.method,
        request.url.path,
        response.status_code,
        process_time_ms,
    )
    return response


register_exception_handlers(app)

app.include_router(api_router, prefix=API_PREFIX)


@app.get("/", tags=["root"], summary="API Root")
async def root() -> dict[str, Any]:
    """Service name, version and documentation links."""
    return {
        "name": __app_name__,
        "version": __version__,
        "documentation": {"swagger": "/docs", "redoc": "/redoc", "openapi": "/openapi.json"},
        "api_prefix": f"{API_PREFIX}/spaces",
    }


@app.get("/health", tags=["health"], summary="Health Check")
async def health_check() -> dict[str, Any]:
    """Liveness probe. Does not contact the object store."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": __version__,
        "service": __app_name__,
    }


def run() -> None:
    """
    Start the API server with uvicorn using the configured host and port.

    Auto-reload and the uvicorn access log are only enabled for debug runs in
    the development environment.
    """
    settings = get_settings()
    dev_mode = settings.debug and settings.is_development
    uvicorn.run(
        "spaces_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=dev_mode,
        access_log=dev_mode,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    run()
