"""
SignatureGalleryStore - enrollment and the per-student sample gallery.

An enrollment is atomic: binary + metadata row, or nothing. If anything
fails after the binary is uploaded, the binary is removed before the error
leaves this module.
"""

import asyncio
import io
from typing import List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from core.exceptions import (
    AppException,
    InvalidSampleError,
    NotMemberError,
    PersistenceError,
)
from core.logging import get_logger
from infrastructure.storage import SignatureStorage
from models.domain.context import CallerContext, ANONYMOUS
from models.domain.signature import SampleUpload, SignatureSample
from repositories.signatures_repo import SignaturesRepository
from repositories.students_repo import StudentsRepository
from services import sample_validator
from services.comparison import signature_descriptor

logger = get_logger(__name__)

MAX_PRIMARY_ATTEMPTS = 5


class SignatureGalleryStore:
    """
    Owns the signatures table, the signatures bucket and
    students.primary_signature_id.
    """

    def __init__(
        self,
        signatures_repo: SignaturesRepository,
        students_repo: StudentsRepository,
        storage: SignatureStorage,
        tracker=None,
    ):
        self._signatures = signatures_repo
        self._students = students_repo
        self._storage = storage
        self._tracker = tracker

    # ============================================================
    # Enrollment
    # ============================================================

    async def enroll(
        self,
        student_id: int,
        upload: SampleUpload,
        ctx: CallerContext = ANONYMOUS,
    ) -> SignatureSample:
        """
        Validate, store and register one signature sample.

        Raises:
            InvalidSampleError: sample rejected by the validator
            PersistenceError: storage or database failure (nothing left behind)
        """
        outcome = sample_validator.validate(
            upload.content,
            upload.media_type,
            upload.declared_size,
        )
        if outcome.rejected:
            logger.info(f"[Gallery] Rejected sample for student {student_id}: {outcome.reason}")
            raise InvalidSampleError(outcome.reason)

        media_type = upload.media_type.split(";")[0].strip().lower()
        path = self._storage.object_path(student_id, media_type, upload.file_name)

        await self._storage.upload(path, upload.content, media_type)

        try:
            width, height = upload.width, upload.height
            if width is None or height is None:
                width, height = probe_dimensions(upload.content)

            features = upload.features
            if features is None:
                features = signature_descriptor(upload.content)

            sample = await self._signatures.create({
                "student_id": student_id,
                "storage_path": path,
                "file_name": upload.file_name,
                "file_size": len(upload.content),
                "file_type": media_type,
                "width": width,
                "height": height,
                "features": features,
                "quality_score": upload.quality_score,
                "device_info": upload.capture.to_device_info(),
            })
        except asyncio.CancelledError:
            await self._discard(path)
            raise
        except Exception as e:
            await self._discard(path)
            message = e.message if isinstance(e, AppException) else str(e)
            raise PersistenceError(f"Failed to save signature: {message}", operation="enroll")

        logger.info(
            f"[Gallery] Enrolled signature {sample.id} for student {student_id} "
            f"({sample.file_size} bytes, by {ctx.label})"
        )

        if self._tracker is not None:
            # The sample is committed; request_training recreates a missing profile
            try:
                await self._tracker.ensure_profile(student_id)
            except AppException as e:
                logger.warning(
                    f"[Gallery] Signature {sample.id} enrolled but profile for student "
                    f"{student_id} was not created: {e.message}"
                )

        return sample

    async def _discard(self, path: str) -> None:
        removed = await self._storage.remove(path)
        if not removed:
            logger.error(f"[Gallery] Could not remove orphaned object {path}")

    # ============================================================
    # Queries
    # ============================================================

    async def list(self, student_id: int) -> List[SignatureSample]:
        """Student's gallery, newest first."""
        return await self._signatures.list_by_student(student_id)

    async def get(self, signature_id: int) -> Optional[SignatureSample]:
        return await self._signatures.get_by_id(signature_id)

    async def count(self, student_id: int) -> int:
        return await self._signatures.count_by_student(student_id)

    def public_url(self, sample: SignatureSample) -> str:
        return self._storage.public_url(sample.storage_path)

    # ============================================================
    # Primary signature
    # ============================================================

    async def get_primary(self, student_id: int) -> Optional[SignatureSample]:
        """
        Effective primary: the explicit designation while it is still in the
        gallery, otherwise the newest sample, otherwise None.
        """
        primary_id = await self._students.get_primary_signature_id(student_id)
        if primary_id is not None:
            sample = await self._signatures.get_by_id(primary_id)
            if sample is not None and sample.student_id == student_id:
                return sample

        gallery = await self._signatures.list_by_student(student_id)
        return gallery[0] if gallery else None

    async def set_primary(
        self,
        student_id: int,
        signature_id: int,
        ctx: CallerContext = ANONYMOUS,
    ) -> SignatureSample:
        """
        Designate a gallery member as primary. Idempotent.

        Raises:
            NotMemberError: signature is not in this student's gallery
        """
        sample = await self._signatures.get_by_id(signature_id)
        if sample is None or sample.student_id != student_id:
            raise NotMemberError(student_id, signature_id)

        for _ in range(MAX_PRIMARY_ATTEMPTS):
            current = await self._students.get_primary_signature_id(student_id)
            if current == signature_id:
                return sample
            if await self._students.compare_and_set_primary(student_id, current, signature_id):
                logger.info(
                    f"[Gallery] Student {student_id}: primary {current} -> {signature_id} (by {ctx.label})"
                )
                return sample

        raise PersistenceError(
            f"Could not set primary signature for student {student_id}",
            operation="set_primary"
        )


def probe_dimensions(content: bytes) -> Tuple[Optional[int], Optional[int]]:
    """(width, height) of an image, or (None, None) if Pillow cannot read it."""
    try:
        with Image.open(io.BytesIO(content)) as image:
            return image.size
    except (UnidentifiedImageError, OSError) as e:
        logger.debug(f"Could not read image dimensions: {e}")
        return None, None
