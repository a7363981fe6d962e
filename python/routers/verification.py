"""
Verification API

- POST /verify - verify a probe signature, optionally against a student.
  The probe is either a multipart `file` or a base64 `data_url` as produced
  by the attendance signature canvas.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from core.exceptions import ValidationError
from core.responses import ApiResponse
from core.logging import get_logger
from models.domain.context import CallerContext
from models.domain.verification import VerificationMode
from services.auth import get_caller_context
from services.verification_engine import VerificationEngine

from .dependencies import get_verification_engine
from .helpers import decode_data_url, read_upload

logger = get_logger(__name__)
router = APIRouter(tags=["verification"])


@router.post("/verify")
async def verify_signature(
    file: Optional[UploadFile] = File(None),
    data_url: Optional[str] = Form(None),
    student_id: Optional[int] = Form(None),
    session_id: Optional[int] = Form(None),
    mode: VerificationMode = Form(VerificationMode.AUTO),
    features: Optional[str] = Form(None),
    engine: VerificationEngine = Depends(get_verification_engine),
    ctx: CallerContext = Depends(get_caller_context),
):
    """
    Verify a signature.

    Always answers with a decision (match / no_match / error) unless the
    probe itself is invalid (422).
    """
    if (file is None) == (data_url is None):
        raise ValidationError("Send exactly one of file or data_url", field="file")

    if file is not None:
        upload = await read_upload(file, features=features)
    else:
        upload = decode_data_url(data_url, features=features)

    result = await engine.verify(
        upload,
        student_id=student_id,
        session_id=session_id,
        mode=mode,
        ctx=ctx,
    )
    return ApiResponse.ok(result)
