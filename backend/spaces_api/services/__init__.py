"""
Business logic layer for the Spaces File API.

Services:
    - FileService: File operations against DigitalOcean Spaces
"""

from spaces_api.services.file_service import FileService, ObjectStream


__all__ = ["FileService", "ObjectStream"]
