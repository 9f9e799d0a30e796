"""
Exception handlers translating failures into ApiResponse envelopes.

Every error leaving the application is a JSON body of the form
``{"success": false, "message": ..., "data": null, "timestamp": ...}``.
Messages for unexpected failures are generic; details go to the log only.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from spaces_api.core.exceptions import SizeLimitExceededError, SpacesError
from spaces_api.models.file import ApiResponse


logger = logging.getLogger(__name__)

SIZE_LIMIT_MESSAGE = "file exceeds size limit."
INTERNAL_ERROR_MESSAGE = "internal server error"


def error_response(status_code: int, message: str) -> JSONResponse:
    """Serialize a failure envelope with the given status code."""
    body = ApiResponse.error(message).model_dump(mode="json", by_alias=True)
    return JSONResponse(status_code=status_code, content=body)


async def size_limit_handler(request: Request, exc: SizeLimitExceededError) -> JSONResponse:
    """Answer 400 for uploads over the size limit."""
    logger.error(
        "Upload rejected, size limit exceeded",
        extra={"path": request.url.path, "size": exc.size, "limit": exc.limit},
    )
    return error_response(status.HTTP_400_BAD_REQUEST, SIZE_LIMIT_MESSAGE)


async def spaces_error_handler(request: Request, exc: SpacesError) -> JSONResponse:
    """Answer 500 with the failure message of any other file operation error."""
    logger.error(
        "File operation failed: %s",
        exc.message,
        extra={"path": request.url.path, "error_type": type(exc).__name__},
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer 400 listing each invalid field as ``location: message``."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    logger.warning("Invalid request: %s", details, extra={"path": request.url.path})
    return error_response(status.HTTP_400_BAD_REQUEST, f"invalid request: {details}")


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap routing and HTTP errors (404, 405, ...) in the envelope, keeping their status."""
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    response = error_response(exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer 500 with a generic message; the exception is only logged."""
    logger.error(
        "Unhandled error on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all handlers to ``app``. The size-limit handler must win over SpacesError."""
    app.add_exception_handler(SizeLimitExceededError, size_limit_handler)
    app.add_exception_handler(SpacesError, spaces_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
