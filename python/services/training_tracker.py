"""
TrainingProfileTracker - per-student readiness state machine.

    untrained -> training -> ready | error
    ready | error -> training        (re-training)

Every status change is a compare-and-set on the profile row, so at most one
training is in flight per student and a completion can never overwrite a
newer request. A cancelled training still resolves to error ("cancelled").
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

from core.config import settings
from core.exceptions import TrainingInProgressError, RecognitionUnavailableError, ValidationError
from core.logging import get_logger, log_transition
from models.domain.context import CallerContext, ANONYMOUS
from models.domain.training import TrainingProfile, TrainingStatus, TrainingOutcome
from repositories.training_repo import TrainingRepository
from services.recognition_client import RecognitionClient

logger = get_logger(__name__)

CANCELLED_MESSAGE = "cancelled"


class TrainingProfileTracker:
    """
    Owns all writes to signature_training_profiles.
    """

    def __init__(
        self,
        training_repo: TrainingRepository,
        recognition: RecognitionClient,
        default_threshold: float = None,
    ):
        self._profiles = training_repo
        self._recognition = recognition
        self.default_threshold = default_threshold or settings.default_similarity_threshold

    # ==================== Queries ====================

    async def get_profile(self, student_id: int) -> Optional[TrainingProfile]:
        return await self._profiles.get(student_id)

    @staticmethod
    def retraining_eligible(profile: Optional[TrainingProfile], gallery_size: int) -> bool:
        """True when the gallery grew past what the last training used."""
        if gallery_size <= 0:
            return False
        if profile is None:
            return True
        if profile.is_training:
            return False
        return gallery_size > profile.num_samples

    # ==================== Lifecycle ====================

    async def ensure_profile(self, student_id: int) -> TrainingProfile:
        """Create an untrained profile on first enrollment. Idempotent."""
        profile = await self._profiles.get(student_id)
        if profile is not None:
            return profile

        profile = await self._profiles.create_if_absent(student_id, self.default_threshold)
        logger.info(f"[Training] Profile for student {student_id}: {profile.status.value}")
        return profile

    async def request_training(
        self,
        student_id: int,
        ctx: CallerContext = ANONYMOUS,
    ) -> TrainingProfile:
        """
        Run one (re)training for a student.

        Raises:
            TrainingInProgressError: another training is in flight

        Returns:
            The profile after the training resolved (ready or error)
        """
        profile = await self.ensure_profile(student_id)

        if profile.is_training:
            raise TrainingInProgressError(student_id)

        claimed = await self._profiles.transition(
            student_id,
            expected=profile.status,
            data={"status": TrainingStatus.TRAINING},
        )
        if claimed is None:
            # Status moved under us; someone else claimed it first
            raise TrainingInProgressError(student_id)

        log_transition(logger, student_id, profile.status.value, "training", f"by {ctx.label}")

        try:
            outcome = await self._recognition.train(student_id)
        except RecognitionUnavailableError as e:
            return await self._fail(student_id, e.message)
        except asyncio.CancelledError:
            await self._fail(student_id, CANCELLED_MESSAGE)
            raise
        except Exception as e:
            await self._fail(student_id, f"Unexpected training failure: {e}")
            raise

        if not outcome.success:
            return await self._fail(student_id, outcome.error or "Training failed")

        return await self._complete(student_id, outcome)

    async def set_threshold(self, student_id: int, threshold: float) -> TrainingProfile:
        """Override a student's similarity threshold."""
        if not 0 < threshold <= 1:
            raise ValidationError("Threshold must be in (0, 1]", field="threshold")

        await self.ensure_profile(student_id)
        profile = await self._profiles.set_threshold(student_id, threshold)
        logger.info(f"[Training] Student {student_id}: threshold={threshold}")
        return profile

    # ==================== Transitions ====================

    async def _complete(self, student_id: int, outcome: TrainingOutcome) -> TrainingProfile:
        data = {
            "status": TrainingStatus.READY,
            "num_samples": outcome.sample_count,
            "last_trained_at": outcome.trained_at or datetime.now(timezone.utc),
            "error_message": None,
        }
        if outcome.centroid is not None:
            data["embedding_centroid"] = outcome.centroid
        if outcome.threshold is not None:
            data["threshold"] = outcome.threshold

        profile = await self._profiles.transition(student_id, TrainingStatus.TRAINING, data)
        if profile is None:
            logger.warning(f"[Training] Student {student_id}: profile left training before completion")
            return await self._profiles.get(student_id)

        log_transition(logger, student_id, "training", "ready", f"{outcome.sample_count} samples")
        return profile

    async def _fail(self, student_id: int, message: str) -> TrainingProfile:
        # num_samples / threshold / last_trained_at keep their last good values
        profile = await self._profiles.transition(
            student_id,
            TrainingStatus.TRAINING,
            {"status": TrainingStatus.ERROR, "error_message": message},
        )
        if profile is None:
            logger.warning(f"[Training] Student {student_id}: profile left training before failure was recorded")
            return await self._profiles.get(student_id)

        log_transition(logger, student_id, "training", "error", message)
        return profile
