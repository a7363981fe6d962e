"""
Dependency injection for signature endpoints.
Shared instances and setup functions.
"""

from services.gallery_store import SignatureGalleryStore
from services.training_tracker import TrainingProfileTracker
from services.verification_engine import VerificationEngine
from services.recognition_client import RecognitionClient

# Global instances (set by main.py on startup)
gallery_store_instance: SignatureGalleryStore = None
training_tracker_instance: TrainingProfileTracker = None
verification_engine_instance: VerificationEngine = None
recognition_client_instance: RecognitionClient = None


def set_services(
    gallery_store: SignatureGalleryStore,
    training_tracker: TrainingProfileTracker,
    verification_engine: VerificationEngine,
    recognition_client: RecognitionClient,
):
    """
    Set the service instances. Called from main.py during startup.
    """
    global gallery_store_instance, training_tracker_instance
    global verification_engine_instance, recognition_client_instance
    gallery_store_instance = gallery_store
    training_tracker_instance = training_tracker
    verification_engine_instance = verification_engine
    recognition_client_instance = recognition_client


def get_gallery_store() -> SignatureGalleryStore:
    """Dependency for FastAPI endpoints"""
    if gallery_store_instance is None:
        raise RuntimeError("SignatureGalleryStore not initialized. Check server startup logs.")
    return gallery_store_instance


def get_training_tracker() -> TrainingProfileTracker:
    """Dependency for FastAPI endpoints"""
    if training_tracker_instance is None:
        raise RuntimeError("TrainingProfileTracker not initialized. Check server startup logs.")
    return training_tracker_instance


def get_verification_engine() -> VerificationEngine:
    """Dependency for FastAPI endpoints"""
    if verification_engine_instance is None:
        raise RuntimeError("VerificationEngine not initialized. Check server startup logs.")
    return verification_engine_instance


def get_recognition_client() -> RecognitionClient:
    """Dependency for FastAPI endpoints"""
    if recognition_client_instance is None:
        raise RuntimeError("RecognitionClient not initialized. Check server startup logs.")
    return recognition_client_instance
