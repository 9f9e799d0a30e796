"""
Core infrastructure for the Spaces File API.

- storage: S3-compatible client adapter bound to the configured Space
- exceptions: error taxonomy raised by the file service
- error_handlers: FastAPI handlers turning failures into ApiResponse envelopes
"""
