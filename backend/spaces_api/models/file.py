"""
File Pydantic models for the Spaces File API.

Defines the metadata snapshot returned for stored objects and the uniform
response envelope wrapping every API reply. Both serialize with camelCase
field names.
"""

from datetime import UTC, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


T = TypeVar("T")


class FileMetadata(BaseModel):
    """
    Snapshot of a stored object's metadata.

    Never mutated; every upload, listing and metadata lookup rebuilds it from
    the store's authoritative response.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    key: str = Field(..., description="Object key, unique within the bucket")
    size: int = Field(..., ge=0, description="Object size in bytes")
    last_modified: datetime | None = Field(
        default=None, description="Last modification time reported by the store"
    )
    e_tag: str | None = Field(
        default=None,
        alias="eTag",
        description="Opaque integrity token returned by the store",
    )
    content_type: str | None = Field(default=None, description="MIME type of the object")
    public_url: str = Field(..., description="Public URL derived from endpoint, bucket and key")


class ApiResponse(BaseModel, Generic[T]):
    """
    Uniform JSON envelope for all responses, successful or not.

    Example:
        >>> ApiResponse.ok("File exists", True).model_dump()["success"]
        True
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    message: str
    data: T | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def ok(cls, message: str, data: T | None = None) -> "ApiResponse[T]":
        """Build a success envelope."""
        return cls(success=True, message=message, data=data)

    @classmethod
    def error(cls, message: str) -> "ApiResponse[T]":
        """Build a failure envelope with no data."""
        return cls(success=False, message=message)
