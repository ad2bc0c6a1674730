"""
S3 client for uploaded file storage.

Dependencies: boto3
System role: Blob store for raw uploads
"""

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from kb_backend.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class S3UploadClient:
    """S3 client writing raw uploads into the upload bucket."""

    def __init__(self, bucket: str, region: str = "us-east-1", client: Any | None = None) -> None:
        """
        Args:
            bucket: S3 bucket name for uploads
            region: AWS region of the bucket
            client: Pre-built boto3 S3 client (tests)
        """
        self._bucket = bucket
        self._region = region
        self._s3_client = client or boto3.client("s3", region_name=region)

    @property
    def bucket(self) -> str:
        return self._bucket

    def put_object(
        self,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """
        Store one object.

        Args:
            key: Object key
            body: Object bytes
            content_type: MIME type stored with the object
            metadata: User metadata (x-amz-meta-*)

        Raises:
            StorageError: If the bucket is not configured or the write fails
        """
        if not self._bucket:
            raise StorageError("S3 bucket name not configured", operation="put_object")

        try:
            self._s3_client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
                Metadata=metadata or {},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"{__name__}:put_object - Upload failed", extra={"key": key, "error": str(e)})
            raise StorageError(f"S3 upload failed: {e}", operation="put_object", details={"key": key}) from e

        logger.info(f"{__name__}:put_object - Stored object", extra={"key": key, "size": len(body)})
