"""
Models package - data structures for the application.

Subpackages:
- domain/ - Domain models (core business entities)
- recognition_schemas.py - Wire schemas of the recognition backend

API request/response DTOs live next to the routers (routers/models.py).
"""

from models.domain import (
    SignatureSample,
    TrainingProfile,
    TrainingStatus,
    VerificationResult,
    Decision,
    CallerContext,
)

__all__ = [
    'SignatureSample',
    'TrainingProfile',
    'TrainingStatus',
    'VerificationResult',
    'Decision',
    'CallerContext',
]
