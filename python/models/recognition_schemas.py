"""
Pydantic models for the recognition backend's JSON contract.
Payloads are validated against these at the adapter boundary; anything that
does not fit is treated as an unavailable backend.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from models.domain.training import TrainingStatus
from models.domain.verification import Decision, PredictedStudent


class BackendProfile(BaseModel):
    """profile object of POST /train/{student_id}"""
    student_id: int
    status: TrainingStatus
    embedding_centroid: Optional[List[float]] = None
    num_samples: int = Field(0, ge=0)
    threshold: Optional[float] = Field(None, gt=0, le=1)
    last_trained_at: Optional[datetime] = None
    error_message: Optional[str] = None


class TrainResponse(BaseModel):
    """Response of POST /train/{student_id}"""
    success: bool
    message: str = ""
    profile: Optional[BackendProfile] = None
    error: Optional[str] = None


class VerifyResponse(BaseModel):
    """Response of POST /verify"""
    success: bool
    match: bool
    predicted_student_id: Optional[int] = None
    predicted_student: Optional[PredictedStudent] = None
    score: float
    decision: Decision
    message: str = ""
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Response of GET /health"""
    status: str
