"""
Domain models for samples, training profiles and verification decisions.
Repositories build these from rows; routers wrap them in DTOs.
"""

from models.domain.signature import SignatureSample, SampleUpload, CaptureMetadata
from models.domain.training import TrainingProfile, TrainingStatus, TrainingOutcome
from models.domain.verification import (
    Decision,
    VerificationPath,
    VerificationMode,
    VerificationResult,
    BackendVerification,
    HealthStatus,
    PredictedStudent,
)
from models.domain.validation import ValidationOutcome
from models.domain.context import CallerContext, ANONYMOUS

__all__ = [
    'SignatureSample',
    'SampleUpload',
    'CaptureMetadata',
    'TrainingProfile',
    'TrainingStatus',
    'TrainingOutcome',
    'Decision',
    'VerificationPath',
    'VerificationMode',
    'VerificationResult',
    'BackendVerification',
    'HealthStatus',
    'PredictedStudent',
    'ValidationOutcome',
    'CallerContext',
    'ANONYMOUS',
]
