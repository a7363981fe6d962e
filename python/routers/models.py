"""
Signature API - Pydantic Models
Request/Response models for signature, training and verification endpoints
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime

from models.domain.signature import SignatureSample
from models.domain.training import TrainingProfile


class SetPrimaryRequest(BaseModel):
    signature_id: int


class ThresholdRequest(BaseModel):
    threshold: float


class SignatureResponse(BaseModel):
    id: int
    student_id: int
    storage_path: str
    url: Optional[str] = None
    file_name: str
    file_size: int
    file_type: str
    width: Optional[int] = None
    height: Optional[int] = None
    quality_score: Optional[float] = None
    device_info: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    @classmethod
    def from_sample(cls, sample: SignatureSample, url: str = None) -> "SignatureResponse":
        return cls(
            id=sample.id,
            student_id=sample.student_id,
            storage_path=sample.storage_path,
            url=url,
            file_name=sample.file_name,
            file_size=sample.file_size,
            file_type=sample.file_type,
            width=sample.width,
            height=sample.height,
            quality_score=sample.quality_score,
            device_info=sample.device_info,
            created_at=sample.created_at,
        )


class TrainingStatusResponse(BaseModel):
    """Profile plus the gallery facts that decide re-training."""
    student_id: int
    profile: Optional[TrainingProfile] = None
    gallery_size: int = 0
    retraining_eligible: bool = False
