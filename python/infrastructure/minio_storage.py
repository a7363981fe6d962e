"""
MinIO Storage backend for signature binaries.
Used when STORAGE_BACKEND=minio.
"""

import io
from typing import Optional

import urllib3
from minio import Minio
from minio.error import S3Error

from core.config import settings
from core.exceptions import PersistenceError
from core.logging import get_logger
from infrastructure.storage import SignatureStorage

logger = get_logger(__name__)


class MinioSignatureStorage(SignatureStorage):
    """MinIO storage service for signature objects."""

    def __init__(self, client: Optional[Minio] = None, bucket: str = None, folder: str = None):
        super().__init__(bucket=bucket, folder=folder)
        self.public_base_url = settings.minio_public_url.rstrip("/")

        self.client = client or Minio(
            endpoint=settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_secure
        )

        logger.info(f"MinIO storage initialized: {settings.minio_endpoint}")

    async def upload(self, path: str, content: bytes, content_type: str) -> None:
        try:
            self.client.put_object(
                bucket_name=self.bucket,
                object_name=path,
                data=io.BytesIO(content),
                length=len(content),
                content_type=content_type
            )
            logger.info(f"Uploaded to {self.bucket}: {path} ({len(content)} bytes)")
        except (S3Error, urllib3.exceptions.HTTPError) as e:
            logger.error(f"MinIO upload error: {e}")
            raise PersistenceError(f"Failed to store signature: {e}", operation="storage.upload")

    async def remove(self, path: str) -> bool:
        try:
            self.client.remove_object(
                bucket_name=self.bucket,
                object_name=path
            )
            logger.info(f"Deleted from {self.bucket}: {path}")
            return True
        except (S3Error, urllib3.exceptions.HTTPError) as e:
            logger.error(f"MinIO delete error: {e}")
            return False

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{path}"
