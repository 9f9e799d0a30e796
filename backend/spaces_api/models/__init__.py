"""Pydantic models for the Spaces File API."""

from spaces_api.models.file import ApiResponse, FileMetadata


__all__ = ["ApiResponse", "FileMetadata"]
