"""
File operations service for the Spaces File API.

This module holds the only decision logic in the service: it generates object
keys, issues put/get/head/list/delete calls through StorageClient, and maps
store responses and errors into FileMetadata, booleans, or the error taxonomy
in spaces_api.core.exceptions.

Every operation is a single blocking request/response cycle against the
object store. There are no retries beyond the SDK defaults.
"""

import logging

from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any, BinaryIO

from botocore.exceptions import BotoCoreError, ClientError

from spaces_api.config import StorageSettings
from spaces_api.core.exceptions import (
    InvalidInputError,
    ObjectNotFoundError,
    StorageOperationError,
)
from spaces_api.core.storage import StorageClient
from spaces_api.models.file import FileMetadata
from spaces_api.utils.file_validator import build_object_key


# Set up module-level logger for tracking S3 operations
logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

DEFAULT_CHUNK_SIZE = 64 * 1024

# Error codes S3-compatible stores use for a missing key (HEAD has no body,
# so it only carries the status code)
NOT_FOUND_ERROR_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _error_message(error: Exception) -> str:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Message") or str(error)
    return str(error)


def _is_not_found(error: ClientError) -> bool:
    return _error_code(error) in NOT_FOUND_ERROR_CODES


class ObjectStream:
    """
    Finite byte stream over a downloaded object's body.

    The caller owns the stream and must close it; using it as a context
    manager or exhausting ``iter_chunks`` both release the underlying
    connection, including when reading fails part way.

    Example:
        >>> with service.download("docs/report.pdf") as stream:  # doctest: +SKIP
        ...     data = stream.read()
    """

    def __init__(
        self,
        body: Any,
        content_length: int | None = None,
        content_type: str | None = None,
    ) -> None:
        self._body = body
        self.content_length = content_length
        self.content_type = content_type
        self.closed = False

    def read(self, amt: int | None = None) -> bytes:
        """Read up to ``amt`` bytes, or the remainder of the object."""
        return self._body.read(amt)

    def iter_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """Yield the body in chunks, closing the stream when iteration ends."""
        try:
            while True:
                chunk = self._body.read(chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            self.close()

    def close(self) -> None:
        """Release the underlying body. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        self._body.close()

    def __enter__(self) -> "ObjectStream":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class FileService:
    """
    File operations against a single Spaces bucket.

    Attributes:
        storage: Adapter that performs the actual S3 calls
        settings: Storage settings used for public URL derivation

    Example:
        >>> service = FileService(StorageClient(settings), settings)  # doctest: +SKIP
        >>> meta = service.upload(fh, 1024, "application/pdf", "report.pdf")
        >>> service.file_exists(meta.key)
        True
    """

    def __init__(self, storage: StorageClient, settings: StorageSettings) -> None:
        self.storage = storage
        self.settings = settings

    # -------------------------------------------------------------------------
    # Upload
    # -------------------------------------------------------------------------

    def upload(
        self,
        stream: BinaryIO,
        size: int | None,
        content_type: str | None,
        filename: str | None,
        folder: str | None = None,
    ) -> FileMetadata:
        """
        Store a new object under a freshly generated key.

        Args:
            stream: Readable binary stream with the file content.
            size: Declared size in bytes; measured from the stream when None.
            content_type: Declared MIME type; defaults to application/octet-stream.
            filename: Original client filename, sanitized before use.
            folder: Optional folder prefix for the key.

        Returns:
            FileMetadata for the stored object.

        Raises:
            InvalidInputError: If the stream is empty. No store call is made.
            StorageOperationError: If the put fails for any I/O or store reason.
        """
        if size is None:
            size = self._measure(stream)
        if size <= 0:
            raise InvalidInputError("Upload file must not be empty")

        key = build_object_key(filename, folder)
        resolved_type = content_type or DEFAULT_CONTENT_TYPE

        logger.info(
            "Uploading file",
            extra={"original_filename": filename, "key": key, "size": size},
        )

        try:
            response = self.storage.put_object(
                key=key,
                body=stream,
                content_type=resolved_type,
                content_length=size,
            )
        except ClientError as e:
            error_msg = f"S3 operation failed: {_error_message(e)}"
            logger.error(error_msg, extra={"key": key, "error_code": _error_code(e)})
            raise StorageOperationError(error_msg) from e
        except (BotoCoreError, OSError) as e:
            error_msg = f"Failed to upload file: {e}"
            logger.error(error_msg, extra={"key": key})
            raise StorageOperationError(error_msg) from e

        e_tag = response.get("ETag")
        logger.info("File uploaded", extra={"key": key, "etag": e_tag})

        return FileMetadata(
            key=key,
            size=size,
            last_modified=datetime.now(UTC),
            e_tag=e_tag,
            content_type=resolved_type,
            public_url=self.public_url(key),
        )

    @staticmethod
    def _measure(stream: BinaryIO) -> int:
        """Size of a seekable stream from its current position to the end."""
        try:
            start = stream.tell()
            end = stream.seek(0, 2)
            stream.seek(start)
        except (AttributeError, OSError) as e:
            raise InvalidInputError("Upload size is unknown and the stream is not seekable") from e
        return end - start

    # -------------------------------------------------------------------------
    # Download / metadata
    # -------------------------------------------------------------------------

    def download(self, key: str) -> ObjectStream:
        """
        Open an object for reading.

        Raises:
            ObjectNotFoundError: If the key does not exist.
            StorageOperationError: On any other store error.
        """
        logger.info("Downloading file", extra={"key": key})

        try:
            response = self.storage.get_object(key)
        except ClientError as e:
            if _is_not_found(e):
                logger.warning("File not found", extra={"key": key})
                raise ObjectNotFoundError(key) from e
            error_msg = f"Failed to download file: {_error_message(e)}"
            logger.error(error_msg, extra={"key": key, "error_code": _error_code(e)})
            raise StorageOperationError(error_msg) from e
        except BotoCoreError as e:
            error_msg = f"Failed to download file: {e}"
            logger.error(error_msg, extra={"key": key})
            raise StorageOperationError(error_msg) from e

        return ObjectStream(
            response["Body"],
            content_length=response.get("ContentLength"),
            content_type=response.get("ContentType"),
        )

    def get_metadata(self, key: str) -> FileMetadata:
        """
        Fetch metadata for an object with a HEAD request.

        Raises:
            ObjectNotFoundError: If the key does not exist.
            StorageOperationError: On any other store error.
        """
        logger.info("Fetching file metadata", extra={"key": key})

        try:
            response = self.storage.head_object(key)
        except ClientError as e:
            if _is_not_found(e):
                logger.warning("File not found", extra={"key": key})
                raise ObjectNotFoundError(key) from e
            error_msg = f"Failed to get file metadata: {_error_message(e)}"
            logger.error(error_msg, extra={"key": key, "error_code": _error_code(e)})
            raise StorageOperationError(error_msg) from e
        except BotoCoreError as e:
            error_msg = f"Failed to get file metadata: {e}"
            logger.error(error_msg, extra={"key": key})
            raise StorageOperationError(error_msg) from e

        return FileMetadata(
            key=key,
            size=response.get("ContentLength", 0),
            last_modified=response.get("LastModified"),
            e_tag=response.get("ETag"),
            content_type=response.get("ContentType"),
            public_url=self.public_url(key),
        )

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def list_files(self, prefix: str | None = None) -> list[FileMetadata]:
        """
        List objects whose key starts with ``prefix`` (all objects if blank).

        Results follow the store's native order (lexicographic by key). Only
        one listing page is read, so buckets larger than a page are returned
        partially.

        Raises:
            StorageOperationError: If the listing call fails.
        """
        prefix = prefix or None
        logger.info("Listing files", extra={"prefix": prefix})

        try:
            response = self.storage.list_objects(prefix)
        except ClientError as e:
            error_msg = f"Failed to list files: {_error_message(e)}"
            logger.error(error_msg, extra={"prefix": prefix, "error_code": _error_code(e)})
            raise StorageOperationError(error_msg) from e
        except BotoCoreError as e:
            error_msg = f"Failed to list files: {e}"
            logger.error(error_msg, extra={"prefix": prefix})
            raise StorageOperationError(error_msg) from e

        if response.get("IsTruncated"):
            logger.warning(
                "Listing truncated to first page",
                extra={"prefix": prefix, "returned": response.get("KeyCount")},
            )

        return [
            FileMetadata(
                key=obj["Key"],
                size=obj.get("Size", 0),
                last_modified=obj.get("LastModified"),
                e_tag=obj.get("ETag"),
                public_url=self.public_url(obj["Key"]),
            )
            for obj in response.get("Contents", [])
        ]

    # -------------------------------------------------------------------------
    # Delete / exists
    # -------------------------------------------------------------------------

    def delete_file(self, key: str) -> bool:
        """
        Delete an object.

        Returns:
            True when the store accepted the delete (S3 also accepts deletes
            of absent keys), False when the request failed. Failures are
            logged, not raised.
        """
        logger.info("Deleting file", extra={"key": key})

        try:
            self.storage.delete_object(key)
        except ClientError as e:
            logger.error(
                "Failed to delete file: %s",
                _error_message(e),
                extra={"key": key, "error_code": _error_code(e)},
            )
            return False
        except BotoCoreError as e:
            logger.error("Failed to delete file: %s", e, extra={"key": key})
            return False

        logger.info("File deleted", extra={"key": key})
        return True

    def file_exists(self, key: str) -> bool:
        """
        Check whether an object exists with a HEAD request.

        Returns:
            True if the object exists, False if the store reports it missing.

        Raises:
            StorageOperationError: For any other error, since existence is
                then unknown.
        """
        try:
            self.storage.head_object(key)
        except ClientError as e:
            if _is_not_found(e):
                logger.debug("File does not exist", extra={"key": key})
                return False
            error_msg = f"Failed to check file existence: {_error_message(e)}"
            logger.error(error_msg, extra={"key": key, "error_code": _error_code(e)})
            raise StorageOperationError(error_msg) from e
        except BotoCoreError as e:
            error_msg = f"Failed to check file existence: {e}"
            logger.error(error_msg, extra={"key": key})
            raise StorageOperationError(error_msg) from e

        logger.debug("File exists", extra={"key": key})
        return True

    def public_url(self, key: str) -> str:
        """Public path-style URL for ``key``. Does not check that it exists."""
        endpoint = self.settings.endpoint_url.rstrip("/")
        return f"{endpoint}/{self.settings.bucket_name}/{key}"


__all__ = ["DEFAULT_CONTENT_TYPE", "FileService", "ObjectStream"]
