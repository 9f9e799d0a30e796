"""
Error taxonomy for the Spaces File API.

Store-level errors (botocore ClientError / BotoCoreError, I/O errors) are
caught at the service boundary and re-raised as one of these types with the
upstream message embedded. Callers never need to import botocore to tell a
missing object from a failed request.
"""


class SpacesError(Exception):
    """Base exception for all file operation failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(SpacesError):
    """Raised when a request carries unusable input, such as an empty file."""


class ObjectNotFoundError(SpacesError):
    """Raised when the requested key does not exist in the bucket."""

    def __init__(self, key: str) -> None:
        super().__init__(f"File not found: {key}")
        self.key = key


class StorageOperationError(SpacesError):
    """Raised when a store or network operation fails for any other reason."""


class SizeLimitExceededError(SpacesError):
    """Raised when an upload request body exceeds the configured size limit."""

    def __init__(self, size: int | None = None, limit: int | None = None) -> None:
        super().__init__("file exceeds size limit.")
        self.size = size
        self.limit = limit


__all__ = [
    "InvalidInputError",
    "ObjectNotFoundError",
    "SizeLimitExceededError",
    "SpacesError",
    "StorageOperationError",
]
