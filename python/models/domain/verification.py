"""
Verification domain models.
Decision records produced by the verification engine and the backend.
"""

from typing import Optional
from pydantic import BaseModel, Field
from enum import Enum


class Decision(str, Enum):
    """Classification outcome of a verification attempt."""
    MATCH = "match"
    NO_MATCH = "no_match"
    ERROR = "error"


class VerificationPath(str, Enum):
    """Which decision path produced a result."""
    BACKEND = "backend"    # Path A: backend classification
    GALLERY = "gallery"    # Path B: nearest neighbour over the gallery


class VerificationMode(str, Enum):
    """Caller preference for path selection."""
    AUTO = "auto"
    BACKEND = "backend"
    GALLERY = "gallery"


class PredictedStudent(BaseModel):
    """Student summary as reported by the recognition backend."""

    id: int
    student_id: Optional[str] = None
    firstname: Optional[str] = None
    surname: Optional[str] = None


class BackendVerification(BaseModel):
    """Backend classification result, already validated at the adapter boundary."""

    success: bool
    match: bool = False
    identity_id: Optional[int] = None
    predicted_student: Optional[PredictedStudent] = None
    score: float = 0.0
    decision: Decision = Decision.ERROR
    message: str = ""


class HealthStatus(BaseModel):
    healthy: bool
    status: str = "unknown"


class VerificationResult(BaseModel):
    """Ephemeral decision record returned to the caller."""

    matched: bool
    matched_identity_id: Optional[int] = None
    score: float = Field(0.0, ge=0, le=1)
    decision: Decision
    message: str = ""

    path: VerificationPath
    threshold: Optional[float] = None
    probe_sample_id: Optional[int] = None
    matched_sample_id: Optional[int] = None
    predicted_student: Optional[PredictedStudent] = None

    @classmethod
    def error(cls, message: str, path: VerificationPath, **kwargs) -> "VerificationResult":
        return cls(
            matched=False,
            score=0.0,
            decision=Decision.ERROR,
            message=message,
            path=path,
            **kwargs
        )
