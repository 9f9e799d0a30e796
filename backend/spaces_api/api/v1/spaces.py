"""
FastAPI router for Spaces file operations.

Endpoints (mounted under /api/v1/spaces):
- POST   /upload            - multipart upload with optional folder
- GET    /download/{key}    - stream object bytes as an attachment
- GET    /metadata/{key}    - object metadata
- GET    /list              - list objects, optionally by prefix
- DELETE /{key}             - delete an object
- GET    /exists/{key}      - existence check

Handlers are plain ``def`` functions, so FastAPI runs each request on its
worker thread pool while the blocking S3 call is in flight. Failures are not
caught here; the exception handlers in spaces_api.core.error_handlers turn
them into ApiResponse envelopes.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from spaces_api.config import Settings, get_settings
from spaces_api.models.file import ApiResponse, FileMetadata
from spaces_api.services.file_service import DEFAULT_CONTENT_TYPE, FileService
from spaces_api.utils.file_validator import content_disposition, validate_upload_size


# Configure module logger
logger = logging.getLogger(__name__)

# Room for multipart boundaries, part headers and the folder field on top of
# the file itself
MULTIPART_OVERHEAD_BYTES = 64 * 1024

router = APIRouter()


# ============================================================================
# Dependency Injection Functions
# ============================================================================


def get_file_service(request: Request) -> FileService:
    """Return the FileService built at startup and stored on the application state."""
    return request.app.state.file_service


def enforce_upload_size_limit(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Coarse guard on the declared Content-Length of an upload request.

    The header covers the whole multipart body, so it is allowed
    MULTIPART_OVERHEAD_BYTES beyond the file limit. The exact limit is applied
    to the parsed file part in the upload handler, which also covers chunked
    requests that carry no Content-Length.

    Raises:
        SizeLimitExceededError: If the declared request size is beyond the
            file limit plus multipart overhead.
    """
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit():
        validate_upload_size(
            int(content_length),
            settings.max_upload_size_bytes + MULTIPART_OVERHEAD_BYTES,
        )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/upload",
    response_model=ApiResponse[FileMetadata],
    summary="Upload file",
    description="Upload a file to DigitalOcean Spaces, optionally under a folder prefix.",
    dependencies=[Depends(enforce_upload_size_limit)],
)
def upload_file(
    file: UploadFile = File(..., description="File to upload"),
    folder: str | None = Form(default=None, description="Target folder (optional)"),
    service: FileService = Depends(get_file_service),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[FileMetadata]:
    """
    Upload a file under a freshly generated key.

    Args:
        file: File part of the multipart form.
        folder: Optional folder prefix for the object key.
        service: Injected file service.
        settings: Application settings carrying the upload size limit.

    Returns:
        ApiResponse[FileMetadata]: Metadata of the stored object.

    Raises:
        SizeLimitExceededError: If the file is larger than the configured limit.
        InvalidInputError: If the file is empty.
        StorageOperationError: If the store rejects the put.
    """
    logger.info(
        "Upload request received",
        extra={"original_filename": file.filename, "size": file.size, "folder": folder},
    )
    validate_upload_size(file.size, settings.max_upload_size_bytes)

    metadata = service.upload(
        stream=file.file,
        size=file.size,
        content_type=file.content_type,
        filename=file.filename,
        folder=folder,
    )
    return ApiResponse.ok("File uploaded successfully", metadata)


@router.get(
    "/download/{key:path}",
    response_class=StreamingResponse,
    summary="Download file",
    description="Stream a file from DigitalOcean Spaces as an attachment.",
)
def download_file(
    key: str,
    service: FileService = Depends(get_file_service),
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    """
    Stream an object as an attachment.

    Content-Length and Content-Type come from the GET response being
    streamed, falling back to the HEAD metadata.

    Args:
        key: Object key, may contain slashes.

    Returns:
        StreamingResponse: Object bytes; the body is closed after sending.

    Raises:
        ObjectNotFoundError: If the key does not exist.
        StorageOperationError: On any other store error.
    """
    logger.info("Download request received", extra={"key": key})

    metadata = service.get_metadata(key)
    stream = service.download(key)

    content_length = stream.content_length
    if content_length is None:
        content_length = metadata.size

    headers = {
        "Content-Disposition": content_disposition(key),
        "Content-Length": str(content_length),
    }
    return StreamingResponse(
        stream.iter_chunks(settings.download_chunk_size),
        media_type=stream.content_type or metadata.content_type or DEFAULT_CONTENT_TYPE,
        headers=headers,
        background=BackgroundTask(stream.close),
    )


@router.get(
    "/metadata/{key:path}",
    response_model=ApiResponse[FileMetadata],
    summary="Get file metadata",
)
def get_file_metadata(
    key: str,
    service: FileService = Depends(get_file_service),
) -> ApiResponse[FileMetadata]:
    """
    Return metadata for one object.

    Raises:
        ObjectNotFoundError: If the key does not exist.
    """
    metadata = service.get_metadata(key)
    return ApiResponse.ok("File metadata retrieved", metadata)


@router.get(
    "/list",
    response_model=ApiResponse[list[FileMetadata]],
    summary="List files",
    description="List files in the bucket, optionally filtered by key prefix.",
)
def list_files(
    prefix: str | None = Query(default=None, description="Key prefix filter (optional)"),
    service: FileService = Depends(get_file_service),
) -> ApiResponse[list[FileMetadata]]:
    """List objects whose key starts with ``prefix``, in key order."""
    files = service.list_files(prefix)
    return ApiResponse.ok(f"Found {len(files)} files", files)


@router.get(
    "/exists/{key:path}",
    response_model=ApiResponse[bool],
    summary="Check file existence",
)
def file_exists(
    key: str,
    service: FileService = Depends(get_file_service),
) -> ApiResponse[bool]:
    """
    Report whether an object exists.

    Raises:
        StorageOperationError: If existence cannot be determined.
    """
    exists = service.file_exists(key)
    return ApiResponse.ok("File exists" if exists else "File does not exist", exists)


@router.delete(
    "/{key:path}",
    response_model=ApiResponse[None],
    summary="Delete file",
)
def delete_file(
    key: str,
    service: FileService = Depends(get_file_service),
) -> ApiResponse[None]:
    """
    Delete an object.

    Always answers 200; a failed delete is reported with ``success=false``.
    """
    logger.info("Delete request received", extra={"key": key})

    if service.delete_file(key):
        return ApiResponse.ok("File deleted successfully")
    return ApiResponse.error("Failed to delete file")
