"""
Signature Verification API - Main Entry Point

This is the FastAPI application entry point.
Uses core/ for configuration, exceptions, and logging.
"""

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from core.config import settings, VERSION
from core.handlers import register_exception_handlers
from core.logging import setup_logging, get_logger

# Setup logging first
setup_logging(level="INFO" if not settings.debug else "DEBUG")
logger = get_logger(__name__)

from infrastructure.supabase import get_supabase_client
from infrastructure.storage import get_signature_storage
from repositories import SignaturesRepository, StudentsRepository, TrainingRepository
from services import (
    SignatureGalleryStore,
    TrainingProfileTracker,
    VerificationEngine,
    get_recognition_client,
    get_comparator,
)

from routers import dependencies, health, signatures, training, verification

# ============================================================
# Application Setup
# ============================================================

app = FastAPI(
    title="Signature Verification API",
    description="Signature enrollment, training and verification for student attendance",
    version=VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    redirect_slashes=False,
)

# ============================================================
# CORS Configuration
# ============================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

logger.info("CORS middleware configured")

# ============================================================
# Global Exception Handlers
# ============================================================

register_exception_handlers(app)

# ============================================================
# Service Initialization (Dependency Injection)
# ============================================================

logger.info(f"Starting Signature Verification API v{VERSION}")
logger.info("Creating singleton service instances...")

# 1. Database and storage
supabase_client = get_supabase_client()
storage = get_signature_storage()
signatures_repo = SignaturesRepository(supabase_client)
students_repo = StudentsRepository(supabase_client)
training_repo = TrainingRepository(supabase_client)
logger.info("✓ Created repositories and signature storage")

# 2. Recognition backend
recognition_client = get_recognition_client()

# 3. Domain services
training_tracker = TrainingProfileTracker(training_repo, recognition_client)
gallery_store = SignatureGalleryStore(signatures_repo, students_repo, storage, tracker=training_tracker)
verification_engine = VerificationEngine(
    gallery_store,
    training_tracker,
    recognition_client,
    comparator=get_comparator(),
)
logger.info("✓ Created gallery store, training tracker and verification engine")

# 4. Inject services into routers
dependencies.set_services(gallery_store, training_tracker, verification_engine, recognition_client)
logger.info("✓ Service instances injected into routers")

# ============================================================
# Router Registration
# ============================================================

app.include_router(health.router, prefix="/api")
app.include_router(signatures.router, prefix="/api")
app.include_router(training.router, prefix="/api")
app.include_router(verification.router, prefix="/api")

logger.info(f"Application startup complete. Running on {settings.server_host}:{settings.server_port}")

# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug
    )
