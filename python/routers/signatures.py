"""
Signatures API
Enrollment, gallery listing and primary signature designation.

- POST /students/{student_id}/signatures - enroll a sample (multipart)
- GET  /students/{student_id}/signatures - gallery, newest first
- GET  /students/{student_id}/signatures/primary - effective primary
- PUT  /students/{student_id}/signatures/primary - designate primary
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from core.responses import ApiResponse
from core.logging import get_logger
from models.domain.context import CallerContext
from models.domain.signature import CaptureMetadata
from services.auth import get_caller_context
from services.gallery_store import SignatureGalleryStore

from .dependencies import get_gallery_store
from .helpers import read_upload
from .models import SetPrimaryRequest, SignatureResponse

logger = get_logger(__name__)
router = APIRouter(prefix="/students/{student_id}/signatures", tags=["signatures"])


@router.post("", status_code=201)
async def enroll_signature(
    student_id: int,
    file: UploadFile = File(...),
    user_agent: Optional[str] = Form(None),
    screen_resolution: Optional[str] = Form(None),
    timezone: Optional[str] = Form(None),
    quality_score: Optional[float] = Form(None),
    features: Optional[str] = Form(None),
    gallery: SignatureGalleryStore = Depends(get_gallery_store),
    ctx: CallerContext = Depends(get_caller_context),
):
    """
    Enroll a signature sample into a student's gallery.

    Rejected samples return 422 INVALID_SAMPLE; storage failures return
    500 PERSISTENCE_ERROR and leave nothing behind.
    """
    capture = CaptureMetadata(
        user_agent=user_agent,
        screen_resolution=screen_resolution,
        timezone=timezone,
    )
    upload = await read_upload(file, capture=capture, quality_score=quality_score, features=features)

    sample = await gallery.enroll(student_id, upload, ctx=ctx)
    return ApiResponse.ok(SignatureResponse.from_sample(sample, gallery.public_url(sample)))


@router.get("")
async def list_signatures(
    student_id: int,
    gallery: SignatureGalleryStore = Depends(get_gallery_store),
):
    """Student's gallery, newest first. Empty for unknown students."""
    samples = await gallery.list(student_id)
    return ApiResponse.listing(
        [SignatureResponse.from_sample(s, gallery.public_url(s)) for s in samples]
    )


@router.get("/primary")
async def get_primary_signature(
    student_id: int,
    gallery: SignatureGalleryStore = Depends(get_gallery_store),
):
    sample = await gallery.get_primary(student_id)
    if sample is None:
        return ApiResponse.ok(None)
    return ApiResponse.ok(SignatureResponse.from_sample(sample, gallery.public_url(sample)))


@router.put("/primary")
async def set_primary_signature(
    student_id: int,
    request: SetPrimaryRequest,
    gallery: SignatureGalleryStore = Depends(get_gallery_store),
    ctx: CallerContext = Depends(get_caller_context),
):
    """Designate a gallery member as primary. 404 NOT_MEMBER otherwise."""
    sample = await gallery.set_primary(student_id, request.signature_id, ctx=ctx)
    return ApiResponse.ok(SignatureResponse.from_sample(sample, gallery.public_url(sample)))
