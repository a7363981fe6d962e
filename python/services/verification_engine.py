"""
VerificationEngine - decides whether a probe signature matches.

Two decision paths:
    backend  (Path A)  the recognition backend classifies the probe
    gallery  (Path B)  the probe is enrolled and compared against the
                       claimed student's own gallery

Verification always ends in a decision (match / no_match / error); only an
invalid probe raises.
"""

import asyncio
from functools import reduce
from typing import Iterable, Optional, Tuple

from core.config import settings
from core.exceptions import AppException, InvalidSampleError, RecognitionUnavailableError, ValidationError
from core.logging import get_logger, log_decision
from models.domain.context import CallerContext, ANONYMOUS
from models.domain.signature import SampleUpload, SignatureSample
from models.domain.training import TrainingProfile
from models.domain.verification import (
    Decision,
    VerificationMode,
    VerificationPath,
    VerificationResult,
)
from services import sample_validator
from services.comparison import SignatureComparator, clamp_score

logger = get_logger(__name__)

INSUFFICIENT_ENROLLMENT = "insufficient enrollment data"


def select_best_match(
    scored: Iterable[Tuple[SignatureSample, float]]
) -> Tuple[Optional[SignatureSample], float]:
    """
    Fold (sample, score) pairs to the best one.
    Ties keep the earlier pair, so gallery order decides.
    """
    def keep_better(best, current):
        return current if current[1] > best[1] else best

    best_sample, best_score = reduce(keep_better, scored, (None, -1.0))
    if best_sample is None:
        return None, 0.0
    return best_sample, best_score


class VerificationEngine:
    """Selects a decision path and produces a VerificationResult."""

    def __init__(
        self,
        gallery,
        tracker,
        recognition,
        comparator: SignatureComparator,
        default_threshold: float = None,
    ):
        self._gallery = gallery
        self._tracker = tracker
        self._recognition = recognition
        self._comparator = comparator
        self.default_threshold = default_threshold or settings.default_similarity_threshold

    async def verify(
        self,
        upload: SampleUpload,
        student_id: Optional[int] = None,
        session_id: Optional[int] = None,
        mode: VerificationMode = VerificationMode.AUTO,
        ctx: CallerContext = ANONYMOUS,
    ) -> VerificationResult:
        """
        Verify a probe signature, optionally against a claimed student.

        Raises:
            InvalidSampleError: probe rejected by the validator
            ValidationError: gallery mode without a student
        """
        outcome = sample_validator.validate(upload.content, upload.media_type, upload.declared_size)
        if outcome.rejected:
            raise InvalidSampleError(outcome.reason)

        if mode == VerificationMode.GALLERY and student_id is None:
            raise ValidationError("student_id is required for gallery verification", field="student_id")

        profile = await self._tracker.get_profile(student_id) if student_id is not None else None
        path = await self._select_path(mode, student_id, profile)

        logger.info(
            f"[Verify] student={student_id} session={session_id} mode={mode.value} "
            f"-> {path.value} (by {ctx.label})"
        )

        if path == VerificationPath.GALLERY:
            result = await self._verify_gallery(upload, student_id, profile, ctx)
        else:
            try:
                result = await self._verify_backend(upload, student_id, session_id, profile)
            except RecognitionUnavailableError as e:
                if student_id is None:
                    result = VerificationResult.error(e.message, VerificationPath.BACKEND)
                else:
                    logger.warning(f"[Verify] Backend unavailable ({e.message}), falling back to gallery")
                    result = await self._verify_gallery(upload, student_id, profile, ctx)

        log_decision(logger, student_id, result)
        return result

    async def _select_path(
        self,
        mode: VerificationMode,
        student_id: Optional[int],
        profile: Optional[TrainingProfile],
    ) -> VerificationPath:
        if mode == VerificationMode.BACKEND:
            return VerificationPath.BACKEND
        if mode == VerificationMode.GALLERY:
            return VerificationPath.GALLERY

        if student_id is None:
            # No gallery to fall back to
            return VerificationPath.BACKEND

        health = await self._recognition.health()
        if health.healthy and profile is not None and profile.is_ready:
            return VerificationPath.BACKEND
        return VerificationPath.GALLERY

    # ==================== Path A ====================

    async def _verify_backend(
        self,
        upload: SampleUpload,
        student_id: Optional[int],
        session_id: Optional[int],
        profile: Optional[TrainingProfile],
    ) -> VerificationResult:
        answer = await self._recognition.verify(
            upload.content,
            media_type=upload.media_type,
            file_name=upload.file_name,
            session_id=session_id,
        )
        threshold = profile.threshold if profile is not None else None

        if not answer.success or answer.decision == Decision.ERROR:
            return VerificationResult.error(
                answer.message or "Recognition backend could not verify the signature",
                VerificationPath.BACKEND,
                threshold=threshold,
            )

        matched = answer.decision == Decision.MATCH
        decision = answer.decision
        message = answer.message

        if matched and student_id is not None and answer.identity_id != student_id:
            # Recognised, but as somebody else
            matched = False
            decision = Decision.NO_MATCH
            message = f"Signature recognised as student {answer.identity_id}, not {student_id}"

        return VerificationResult(
            matched=matched,
            matched_identity_id=answer.identity_id if matched else None,
            score=clamp_score(answer.score),
            decision=decision,
            message=message,
            path=VerificationPath.BACKEND,
            threshold=threshold,
            predicted_student=answer.predicted_student,
        )

    # ==================== Path B ====================

    async def _verify_gallery(
        self,
        upload: SampleUpload,
        student_id: int,
        profile: Optional[TrainingProfile],
        ctx: CallerContext,
    ) -> VerificationResult:
        threshold = profile.threshold if profile is not None and profile.is_ready else self.default_threshold
        path = VerificationPath.GALLERY

        try:
            probe = await self._gallery.enroll(student_id, upload, ctx=ctx)
            gallery = await self._gallery.list(student_id)
        except ValidationError:
            raise
        except AppException as e:
            logger.warning(f"[Verify] Gallery unavailable for student {student_id}: {e.message}")
            return VerificationResult.error(e.message, path, threshold=threshold)

        candidates = [sample for sample in gallery if sample.id != probe.id]
        if not candidates:
            return VerificationResult(
                matched=False,
                score=0.0,
                decision=Decision.NO_MATCH,
                message=INSUFFICIENT_ENROLLMENT,
                path=path,
                threshold=threshold,
                probe_sample_id=probe.id,
            )

        try:
            scores = await asyncio.gather(
                *(self._comparator.compare(probe, candidate) for candidate in candidates)
            )
        except AppException as e:
            logger.warning(f"[Verify] Comparison failed for student {student_id}: {e.message}")
            return VerificationResult.error(e.message, path, threshold=threshold, probe_sample_id=probe.id)

        best, best_score = select_best_match(
            zip(candidates, (clamp_score(score) for score in scores))
        )
        matched = best is not None and best_score >= threshold

        logger.debug(f"[Verify] student={student_id} best sample={best.id if best else None}")

        return VerificationResult(
            matched=matched,
            matched_identity_id=student_id if matched else None,
            score=best_score,
            decision=Decision.MATCH if matched else Decision.NO_MATCH,
            message="Signature matched" if matched else "Signature did not match",
            path=path,
            threshold=threshold,
            probe_sample_id=probe.id,
            matched_sample_id=best.id if matched else None,
        )
