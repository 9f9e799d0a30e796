"""
Spaces File API S3-Compatible Storage Client

This module provides the single adapter through which the service talks to
DigitalOcean Spaces. It wraps a boto3 S3 client configured with:

- An endpoint override resolved from the configured endpoint URL template
- Static credentials from StorageSettings
- Path-style addressing (endpoint/bucket/key)
- A fixed placeholder region; Spaces routes by endpoint, not by region name

Each method issues exactly one S3 API call against the configured bucket and
returns the raw boto3 response. botocore errors propagate unchanged; mapping
them to the service's error taxonomy happens in FileService.
"""

import logging

from typing import Any, BinaryIO

import boto3

from botocore.client import Config
from botocore.exceptions import BotoCoreError

from spaces_api.config import StorageSettings


# Spaces ignores the signing region, but botocore requires one
PLACEHOLDER_REGION = "us-east-1"

# Configure module-level logger
logger = logging.getLogger(__name__)


class StorageClient:
    """
    Thin S3-protocol adapter bound to one bucket.

    Attributes:
        settings: Storage settings used to build the client
        s3_client: boto3 S3 client (or a compatible object in tests)
        bucket_name: Target bucket for all operations

    Example usage:
        ```python
        from spaces_api.config import get_storage_settings
        from spaces_api.core.storage import StorageClient

        storage = StorageClient(get_storage_settings())
        head = storage.head_object("reports/summary.pdf")
        ```
    """

    def __init__(self, settings: StorageSettings, s3_client: Any | None = None) -> None:
        """
        Initialize the adapter, creating a boto3 client unless one is supplied.

        Args:
            settings: Validated storage settings.
            s3_client: Optional pre-built S3 client. Tests pass an in-memory
                fake here; production code leaves it as None.

        Raises:
            BotoCoreError: If the boto3 client cannot be constructed.
        """
        self.settings = settings
        self.bucket_name = settings.bucket_name

        if s3_client is not None:
            self.s3_client = s3_client
            return

        client_config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
        )

        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=settings.endpoint_url,
                aws_access_key_id=settings.access_key,
                aws_secret_access_key=settings.secret_key,
                region_name=PLACEHOLDER_REGION,
                config=client_config,
            )
        except BotoCoreError:
            logger.exception(
                "Failed to initialize S3 storage client",
                extra={"endpoint": settings.endpoint_url},
            )
            raise

        logger.info(
            "S3 storage client initialized",
            extra={"bucket": self.bucket_name, "endpoint": settings.endpoint_url},
        )

    def put_object(
        self,
        key: str,
        body: BinaryIO,
        content_type: str,
        content_length: int,
    ) -> dict[str, Any]:
        """Store ``body`` under ``key``; returns the PutObject response (ETag)."""
        return self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=body,
            ContentType=content_type,
            ContentLength=content_length,
        )

    def get_object(self, key: str) -> dict[str, Any]:
        """Fetch an object; the response ``Body`` is an unread streaming body."""
        return self.s3_client.get_object(Bucket=self.bucket_name, Key=key)

    def head_object(self, key: str) -> dict[str, Any]:
        """Fetch object headers (size, type, ETag, last modified) without the body."""
        return self.s3_client.head_object(Bucket=self.bucket_name, Key=key)

    def list_objects(self, prefix: str | None = None) -> dict[str, Any]:
        """
        List objects in the bucket with a single ListObjectsV2 call.

        Only the first page is returned; callers that need more must inspect
        ``IsTruncated`` themselves.
        """
        params: dict[str, Any] = {"Bucket": self.bucket_name}
        if prefix:
            params["Prefix"] = prefix
        return self.s3_client.list_objects_v2(**params)

    def delete_object(self, key: str) -> dict[str, Any]:
        """Delete an object. S3 reports success for keys that do not exist."""
        return self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)


__all__ = ["PLACEHOLDER_REGION", "StorageClient"]
