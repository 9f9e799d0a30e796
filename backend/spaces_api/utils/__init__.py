"""
Utilities Package for the Spaces File API.

Modules:
--------
file_validator:
    Filename sanitization, object key construction, upload size checks and
    Content-Disposition values for downloads.

logger:
    Structured logging configuration (JSON and plain-text formatters,
    application-wide setup, context adapter).
"""

from spaces_api.utils.file_validator import (
    build_object_key,
    content_disposition,
    sanitize_filename,
    validate_upload_size,
)
from spaces_api.utils.logger import add_log_context, setup_logging


__all__ = [
    "add_log_context",
    "build_object_key",
    "content_disposition",
    "sanitize_filename",
    "setup_logging",
    "validate_upload_size",
]
