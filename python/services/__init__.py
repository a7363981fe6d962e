"""
Services package.

Main modules:
- gallery_store.py - SignatureGalleryStore (enrollment, gallery, primary)
- training_tracker.py - TrainingProfileTracker (per-student readiness)
- verification_engine.py - VerificationEngine (backend / gallery paths)

Supporting modules:
- sample_validator.py - Intake checks for uploaded samples
- recognition_client.py - HTTP adapter for the recognition backend
- comparison.py - Pairwise signature comparators

Other:
- auth.py - Supabase JWT verification and CallerContext dependency
"""

from services.gallery_store import SignatureGalleryStore
from services.training_tracker import TrainingProfileTracker
from services.verification_engine import VerificationEngine, select_best_match
from services.recognition_client import RecognitionClient, get_recognition_client
from services.comparison import (
    SignatureComparator,
    FeatureVectorComparator,
    RpcSignatureComparator,
    get_comparator,
)

__all__ = [
    'SignatureGalleryStore',
    'TrainingProfileTracker',
    'VerificationEngine',
    'select_best_match',
    'RecognitionClient',
    'get_recognition_client',
    'SignatureComparator',
    'FeatureVectorComparator',
    'RpcSignatureComparator',
    'get_comparator',
]
