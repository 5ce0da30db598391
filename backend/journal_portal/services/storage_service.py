"""
AWS S3 storage for manuscript files and images.
"""
import logging
import re
import time
import uuid
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request

from journal_portal.core.config import Settings
from journal_portal.core.error_handling import StorageError

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class S3StorageService:
    """Uploads file bytes to S3 and hands back public URLs."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client = None

    @property
    def s3_client(self):
        # Created on first use so the app can start without AWS credentials
        if self._client is None:
            self._client = boto3.client('s3', region_name=self.settings.aws_region)
            logger.info(f"S3 client initialized for region: {self.settings.aws_region}")
        return self._client

    @staticmethod
    def build_key(prefix: str, file_name: str) -> str:
        """Object key of the form ``{prefix}/{millis}_{short uuid}_{safe_name}``."""
        safe_name = _UNSAFE_KEY_CHARS.sub("_", file_name or "file").strip("_") or "file"
        return f"{prefix.rstrip('/')}/{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}_{safe_name}"

    def public_url(self, key: str) -> str:
        if self.settings.s3_public_base_url:
            return f"{self.settings.s3_public_base_url.rstrip('/')}/{key}"
        return f"https://{self.settings.s3_bucket_name}.s3.{self.settings.aws_region}.amazonaws.com/{key}"

    def upload_bytes(self, data: bytes, key: str, content_type: Optional[str] = None) -> str:
        """
        Upload bytes to S3.

        Args:
            data: File content
            key: S3 object key
            content_type: MIME type of the file

        Returns:
            Public URL of the stored object

        Raises:
            StorageError: If the upload fails
        """
        extra_args = {}
        if content_type:
            extra_args['ContentType'] = content_type

        try:
            self.s3_client.put_object(
                Bucket=self.settings.s3_bucket_name,
                Key=key,
                Body=data,
                **extra_args
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload file to S3: {e}")
            raise StorageError("File upload failed", s3_key=key, operation="put_object", cause=e)

        logger.info(f"Uploaded file to S3: {key} ({len(data)} bytes)")
        return self.public_url(key)


def get_storage_service(request: Request) -> S3StorageService:
    """Storage service created in the application lifespan."""
    return request.app.state.storage
