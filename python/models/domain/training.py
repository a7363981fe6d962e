"""
Training domain models.
Represents the per-student training profile and training outcomes.
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field
from enum import Enum

from core.config import settings


class TrainingStatus(str, Enum):
    """Training profile status."""
    UNTRAINED = "untrained"
    TRAINING = "training"
    READY = "ready"
    ERROR = "error"


class TrainingProfile(BaseModel):
    """Per-student readiness to verify."""

    student_id: int = Field(..., description="Identity ID")
    status: TrainingStatus = Field(TrainingStatus.UNTRAINED, description="Profile status")

    # Bookkeeping of the last successful training
    num_samples: int = Field(0, ge=0, description="Samples used by the last successful training")
    threshold: float = Field(
        default_factory=lambda: settings.default_similarity_threshold,
        gt=0,
        le=1,
        description="Similarity threshold",
    )
    embedding_centroid: Optional[List[float]] = Field(None, description="Centroid reported by the backend")
    last_trained_at: Optional[datetime] = Field(None, description="Last successful training")

    error_message: Optional[str] = Field(None, description="Set only in error status")
    updated_at: Optional[datetime] = None

    @property
    def is_ready(self) -> bool:
        return self.status == TrainingStatus.READY

    @property
    def is_training(self) -> bool:
        return self.status == TrainingStatus.TRAINING


class TrainingOutcome(BaseModel):
    """Result of a backend training call."""

    success: bool
    sample_count: int = Field(0, ge=0)
    centroid: Optional[List[float]] = None
    threshold: Optional[float] = Field(None, gt=0, le=1)
    trained_at: Optional[datetime] = None
    message: Optional[str] = None
    error: Optional[str] = None
