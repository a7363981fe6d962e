"""
Signature API Helper Functions
"""

import base64
import binascii
import json
import re
from typing import Any, Optional

from fastapi import UploadFile

from core.config import settings
from core.exceptions import InvalidSampleError, ValidationError
from models.domain.signature import CaptureMetadata, SampleUpload


def parse_features(raw: Optional[str]) -> Any:
    """Decode the optional `features` form field (JSON list or object)."""
    if raw is None or not raw.strip():
        return None
    try:
        features = json.loads(raw)
    except ValueError:
        raise ValidationError("features must be valid JSON", field="features")
    if not isinstance(features, (list, dict)):
        raise ValidationError("features must be a JSON list or object", field="features")
    return features


async def read_upload(
    file: UploadFile,
    capture: CaptureMetadata = None,
    quality_score: Optional[float] = None,
    features: Optional[str] = None,
) -> SampleUpload:
    """
    Read a multipart file into a SampleUpload.
    At most one byte past the size cap is read; the validator rejects the rest.
    """
    content = await file.read(settings.max_sample_bytes + 1)
    declared = file.size if file.size is not None else len(content)
    if quality_score is not None and not 0 <= quality_score <= 1:
        raise ValidationError("quality_score must be between 0 and 1", field="quality_score")

    return SampleUpload(
        content=content,
        media_type=file.content_type or "application/octet-stream",
        file_name=file.filename or "signature.png",
        byte_size=declared,
        capture=capture or CaptureMetadata(),
        quality_score=quality_score,
        features=parse_features(features),
    )


DATA_URL_PATTERN = re.compile(
    r"^data:(?P<media_type>[\w.+-]+/[\w.+-]+)?(?:;[^;,]*?)*?;base64,(?P<payload>.*)$",
    re.DOTALL,
)


def decode_data_url(data_url: str, features: Optional[str] = None) -> SampleUpload:
    """
    Decode a base64 `data:` URL (what the attendance canvas submits) into a
    SampleUpload. The bytes still go through the sample validator afterwards.
    """
    match = DATA_URL_PATTERN.match(data_url.strip())
    if match is None:
        raise ValidationError("data_url must be a base64 data: URL", field="data_url")

    payload = re.sub(r"\s+", "", match.group("payload"))
    if len(payload) > _max_encoded_length():
        raise InvalidSampleError(f"File is too large. Maximum size is {settings.max_sample_bytes} bytes")
    try:
        content = base64.b64decode(payload, validate=True)
    except binascii.Error:
        raise ValidationError("data_url payload is not valid base64", field="data_url")

    media_type = match.group("media_type") or "image/png"
    return SampleUpload(
        content=content,
        media_type=media_type,
        file_name=f"signature.{media_type.split('/')[-1]}",
        byte_size=len(content),
        features=parse_features(features),
    )


def _max_encoded_length() -> int:
    return 4 * (settings.max_sample_bytes // 3 + 1)
