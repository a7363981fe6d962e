"""
Signature binary storage.
Objects live at {folder}/{student_id}/{random}.{ext} inside the signatures bucket.
"""

import os
import uuid
from typing import Optional

from core.config import settings
from core.exceptions import PersistenceError
from core.logging import get_logger
from infrastructure.supabase import SupabaseClient, get_supabase_client

logger = get_logger(__name__)

EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
}


class SignatureStorage:
    """
    Base class for signature object storage.

    Subclasses implement upload/remove/public_url for a concrete backend.
    Backend-specific errors are converted to PersistenceError.
    """

    def __init__(self, bucket: str = None, folder: str = None):
        self.bucket = bucket or settings.signatures_bucket
        self.folder = folder if folder is not None else settings.signatures_folder

    def object_path(self, student_id: int, media_type: str, file_name: str = None) -> str:
        """Build a fresh, collision-free object path for a student's sample."""
        ext = EXTENSIONS.get((media_type or "").lower())
        if ext is None and file_name:
            ext = os.path.splitext(file_name)[1].lstrip(".").lower() or None
        ext = ext or "png"
        unique_id = uuid.uuid4().hex[:12]
        prefix = f"{self.folder}/" if self.folder else ""
        return f"{prefix}{student_id}/{unique_id}.{ext}"

    async def upload(self, path: str, content: bytes, content_type: str) -> None:
        raise NotImplementedError

    async def remove(self, path: str) -> bool:
        raise NotImplementedError

    def public_url(self, path: str) -> str:
        raise NotImplementedError


class SupabaseSignatureStorage(SignatureStorage):
    """Supabase Storage bucket backend."""

    def __init__(self, supabase_client: SupabaseClient, bucket: str = None, folder: str = None):
        super().__init__(bucket=bucket, folder=folder)
        self.client = supabase_client

    async def upload(self, path: str, content: bytes, content_type: str) -> None:
        try:
            self.client.bucket(self.bucket).upload(
                path,
                content,
                file_options={
                    "content-type": content_type,
                    "cache-control": "3600",
                    "upsert": "false",
                },
            )
            logger.info(f"Uploaded to {self.bucket}: {path} ({len(content)} bytes)")
        except Exception as e:
            logger.error(f"Storage upload error: {path} - {e}")
            raise PersistenceError(f"Failed to store signature: {e}", operation="storage.upload")

    async def remove(self, path: str) -> bool:
        try:
            self.client.bucket(self.bucket).remove([path])
            logger.info(f"Deleted from {self.bucket}: {path}")
            return True
        except Exception as e:
            logger.error(f"Storage delete error: {path} - {e}")
            return False

    def public_url(self, path: str) -> str:
        return self.client.bucket(self.bucket).get_public_url(path)


# Global instance
_signature_storage: Optional[SignatureStorage] = None


def get_signature_storage() -> SignatureStorage:
    """Get singleton storage for the configured STORAGE_BACKEND."""
    global _signature_storage
    if _signature_storage is None:
        backend = settings.storage_backend.lower()
        if backend == "minio":
            from infrastructure.minio_storage import MinioSignatureStorage
            _signature_storage = MinioSignatureStorage()
        elif backend == "supabase":
            _signature_storage = SupabaseSignatureStorage(get_supabase_client())
        else:
            raise ValueError(f"Unknown STORAGE_BACKEND: {settings.storage_backend}")
        logger.info(f"Signature storage: {backend} (bucket={_signature_storage.bucket})")
    return _signature_storage
