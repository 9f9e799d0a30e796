"""
Spaces File API package.

The API is organized by version; all current endpoints live in v1 and are
served under the /api/v1 prefix.
"""
