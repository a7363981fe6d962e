"""
Health API

- GET /health - service status and recognition backend reachability
"""

from fastapi import APIRouter, Depends

from core.config import settings, VERSION
from core.responses import ApiResponse
from services.recognition_client import RecognitionClient

from .dependencies import get_recognition_client

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(recognition: RecognitionClient = Depends(get_recognition_client)):
    """
    Health check endpoint.
    The service stays healthy when the backend is down; verification falls back to the gallery.
    """
    backend = await recognition.health()
    return ApiResponse.ok({
        "status": "healthy",
        "service": "signature-verification",
        "version": VERSION,
        "storage_backend": settings.storage_backend,
        "recognition": backend.model_dump(),
    })
