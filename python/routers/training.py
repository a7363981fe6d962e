"""
Training API
Per-student training profile.

- GET  /students/{student_id}/training - profile, gallery size, re-training eligibility
- POST /students/{student_id}/training - request (re)training
- PUT  /students/{student_id}/training/threshold - override similarity threshold
"""

from fastapi import APIRouter, Depends

from core.responses import ApiResponse
from core.logging import get_logger
from models.domain.context import CallerContext
from services.auth import get_caller_context
from services.gallery_store import SignatureGalleryStore
from services.training_tracker import TrainingProfileTracker

from .dependencies import get_gallery_store, get_training_tracker
from .models import ThresholdRequest, TrainingStatusResponse

logger = get_logger(__name__)
router = APIRouter(prefix="/students/{student_id}/training", tags=["training"])


async def _status(
    student_id: int,
    tracker: TrainingProfileTracker,
    gallery: SignatureGalleryStore,
    profile=None,
) -> TrainingStatusResponse:
    if profile is None:
        profile = await tracker.get_profile(student_id)
    gallery_size = await gallery.count(student_id)
    return TrainingStatusResponse(
        student_id=student_id,
        profile=profile,
        gallery_size=gallery_size,
        retraining_eligible=tracker.retraining_eligible(profile, gallery_size),
    )


@router.get("")
async def get_training_status(
    student_id: int,
    tracker: TrainingProfileTracker = Depends(get_training_tracker),
    gallery: SignatureGalleryStore = Depends(get_gallery_store),
):
    return ApiResponse.ok(await _status(student_id, tracker, gallery))


@router.post("")
async def request_training(
    student_id: int,
    tracker: TrainingProfileTracker = Depends(get_training_tracker),
    gallery: SignatureGalleryStore = Depends(get_gallery_store),
    ctx: CallerContext = Depends(get_caller_context),
):
    """
    Run one training for the student and return the resolved profile.

    409 TRAINING_IN_PROGRESS if a training is already running. A failed
    training is not an HTTP error: the profile comes back in `error` status.
    """
    profile = await tracker.request_training(student_id, ctx=ctx)
    return ApiResponse.ok(await _status(student_id, tracker, gallery, profile))


@router.put("/threshold")
async def set_threshold(
    student_id: int,
    request: ThresholdRequest,
    tracker: TrainingProfileTracker = Depends(get_training_tracker),
    ctx: CallerContext = Depends(get_caller_context),
):
    profile = await tracker.set_threshold(student_id, request.threshold)
    logger.info(f"Threshold for student {student_id} set by {ctx.label}")
    return ApiResponse.ok(profile)
