"""
Filename and object key utilities for the Spaces File API.

- Filename sanitization: strips directory components and path traversal
  segments so the stored name can never escape its folder prefix
- Object key construction: ``[folder/]<uuid>_<filename>``
- Upload size enforcement against the configured limit
- Content-Disposition header values for downloads (RFC 5987 encoding)
"""

import re
import uuid

from urllib.parse import quote

from spaces_api.core.exceptions import SizeLimitExceededError


# Fallback when nothing usable remains of the original filename
DEFAULT_FILENAME: str = "unnamed_file"

# Common filesystem limit, also kept for object key readability
MAX_FILENAME_LENGTH: int = 255

# Segments that only navigate the path and carry no name
_TRAVERSAL_SEGMENTS = {"", ".", ".."}

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def sanitize_filename(filename: str | None) -> str:
    """
    Reduce a client-supplied filename to a safe final path segment.

    Backslashes are treated as separators, ``.`` and ``..`` segments are
    dropped, and only the last remaining segment is kept. Control characters
    are removed. The extension and ordinary characters (spaces, unicode) are
    preserved.

    Args:
        filename: Original filename from the multipart part, possibly None.

    Returns:
        Sanitized filename, or ``unnamed_file`` if nothing usable remains.

    Example:
        >>> sanitize_filename("../../etc/passwd")
        'passwd'
        >>> sanitize_filename("C:\\\\Users\\\\me\\\\report.pdf")
        'report.pdf'
        >>> sanitize_filename("report.pdf")
        'report.pdf'
    """
    if not filename:
        return DEFAULT_FILENAME

    cleaned = _CONTROL_CHARS.sub("", filename.replace("\\", "/"))
    segments = [seg.strip() for seg in cleaned.split("/")]
    segments = [seg for seg in segments if seg not in _TRAVERSAL_SEGMENTS]

    if not segments:
        return DEFAULT_FILENAME

    name = segments[-1]
    if len(name) > MAX_FILENAME_LENGTH:
        stem, dot, extension = name.rpartition(".")
        if dot and stem and len(extension) < MAX_FILENAME_LENGTH - 1:
            name = stem[: MAX_FILENAME_LENGTH - len(extension) - 1] + "." + extension
        else:
            name = name[:MAX_FILENAME_LENGTH]
    return name


def normalize_folder(folder: str | None) -> str | None:
    """
    Reduce a folder prefix to its plain path segments.

    Backslashes count as separators; empty, ``.`` and ``..`` segments and
    control characters are dropped, so the prefix stays inside the bucket.
    Blank means no folder.

    Example:
        >>> normalize_folder("/docs/2024/")
        'docs/2024'
        >>> normalize_folder("../../etc")
        'etc'
    """
    if folder is None:
        return None
    cleaned = _CONTROL_CHARS.sub("", folder.replace("\\", "/"))
    segments = [seg.strip() for seg in cleaned.split("/")]
    segments = [seg for seg in segments if seg not in _TRAVERSAL_SEGMENTS]
    return "/".join(segments) or None


def build_object_key(filename: str | None, folder: str | None = None) -> str:
    """
    Build a collision-resistant object key for an upload.

    A fresh UUID4 prefix makes every key unique, even for repeated uploads of
    the same filename into the same folder.

    Example:
        >>> build_object_key("report.pdf", "docs")  # doctest: +SKIP
        'docs/3f1c0b9e-8d2a-4c4e-9a51-0b6f2d7e9c11_report.pdf'
    """
    name = f"{uuid.uuid4()}_{sanitize_filename(filename)}"
    prefix = normalize_folder(folder)
    return f"{prefix}/{name}" if prefix else name


def validate_upload_size(size: int | None, max_size: int) -> None:
    """
    Enforce the upload size limit.

    Raises:
        SizeLimitExceededError: If ``size`` is known and larger than ``max_size``.
    """
    if size is not None and size > max_size:
        raise SizeLimitExceededError(size=size, limit=max_size)


def content_disposition(key: str) -> str:
    """
    Build an attachment Content-Disposition header for a download.

    The filename is the key's last path segment, percent-encoded as UTF-8 so
    that spaces and non-ASCII names survive every client.

    Example:
        >>> content_disposition("docs/annual report.pdf")
        "attachment; filename*=UTF-8''annual%20report.pdf"
    """
    filename = key.rsplit("/", 1)[-1]
    return f"attachment; filename*=UTF-8''{quote(filename, safe='')}"


__all__ = [
    "DEFAULT_FILENAME",
    "MAX_FILENAME_LENGTH",
    "build_object_key",
    "content_disposition",
    "normalize_folder",
    "sanitize_filename",
    "validate_upload_size",
]
