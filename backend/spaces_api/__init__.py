"""
Spaces File API Package

REST facade over DigitalOcean Spaces (S3-compatible object storage) offering
upload, download, metadata lookup, listing, existence checks and deletion.

Package Structure:
- api/: REST API endpoints organized by version (v1)
- core/: Storage client adapter, error taxonomy and exception handlers
- models/: Pydantic response models
- services/: File operations service
- utils/: Filename/key helpers and logging setup
"""

__version__ = "1.0.0"
__app_name__ = "spaces-file-api"
