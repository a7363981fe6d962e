import os

# Settings are built at import time; required keys must exist first.
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

import asyncio
import io
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
from PIL import Image, ImageDraw

from core.exceptions import DatabaseError, PersistenceError, RecognitionUnavailableError
from infrastructure.storage import SignatureStorage
from models.domain.signature import SampleUpload, SignatureSample
from models.domain.training import TrainingOutcome, TrainingProfile, TrainingStatus
from models.domain.verification import BackendVerification, Decision, HealthStatus
from services.comparison import SignatureComparator
from services.gallery_store import SignatureGalleryStore
from services.training_tracker import TrainingProfileTracker
from services.verification_engine import VerificationEngine


def make_png(width: int = 40, height: int = 20) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color=(255, 255, 255)).save(buf, "PNG")
    return buf.getvalue()


ZIGZAG = [(10, 60), (40, 15), (70, 60), (100, 15), (130, 60), (160, 15)]
LOOP = [(20, 40), (60, 10), (110, 20), (120, 60), (70, 70), (30, 55), (90, 35), (180, 40)]


def make_signature_png(stroke=ZIGZAG, size=(200, 80), transparent: bool = False) -> bytes:
    """Black pen stroke on white paper, or on a transparent canvas."""
    background = (0, 0, 0, 0) if transparent else (255, 255, 255, 255)
    image = Image.new("RGBA", size, background)
    ImageDraw.Draw(image).line(stroke, fill=(0, 0, 0, 255), width=4)
    buf = io.BytesIO()
    image.save(buf, "PNG")
    return buf.getvalue()


def make_upload(content: bytes = None, media_type: str = "image/png", **kwargs) -> SampleUpload:
    content = make_png() if content is None else content
    return SampleUpload(content=content, media_type=media_type, **kwargs)


# ============================================================
# In-memory repositories
# ============================================================

class _FakeSignaturesRepo:
    def __init__(self) -> None:
        self.rows: Dict[int, SignatureSample] = {}
        self._next_id = 1
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.fail_create = False
        self.block_create: Optional[asyncio.Event] = None
        self.create_started: Optional[asyncio.Event] = None

    async def create(self, data: dict) -> SignatureSample:
        if self.create_started is not None:
            self.create_started.set()
        if self.block_create is not None:
            await self.block_create.wait()
        if self.fail_create:
            raise DatabaseError("insert failed", operation="signatures.create")

        self._clock += timedelta(seconds=1)
        sample = SignatureSample(id=self._next_id, created_at=self._clock, **data)
        self.rows[sample.id] = sample
        self._next_id += 1
        return sample

    async def get_by_id(self, id: int) -> Optional[SignatureSample]:
        return self.rows.get(id)

    async def list_by_student(self, student_id: int) -> List[SignatureSample]:
        samples = [s for s in self.rows.values() if s.student_id == student_id]
        return sorted(samples, key=lambda s: (s.created_at, s.id), reverse=True)

    async def count_by_student(self, student_id: int) -> int:
        return len([s for s in self.rows.values() if s.student_id == student_id])


class _FakeStudentsRepo:
    def __init__(self) -> None:
        self.primary: Dict[int, Optional[int]] = {}

    async def get_primary_signature_id(self, student_id: int) -> Optional[int]:
        return self.primary.get(student_id)

    async def compare_and_set_primary(self, student_id: int, expected: Optional[int], signature_id: int) -> bool:
        if self.primary.get(student_id) != expected:
            return False
        self.primary[student_id] = signature_id
        return True


class _FakeTrainingRepo:
    def __init__(self) -> None:
        self.profiles: Dict[int, TrainingProfile] = {}

    async def get(self, student_id: int) -> Optional[TrainingProfile]:
        return self.profiles.get(student_id)

    async def create_if_absent(self, student_id: int, threshold: float) -> TrainingProfile:
        if student_id not in self.profiles:
            self.profiles[student_id] = TrainingProfile(student_id=student_id, threshold=threshold)
        return self.profiles[student_id]

    async def transition(self, student_id: int, expected: TrainingStatus, data: dict) -> Optional[TrainingProfile]:
        current = self.profiles.get(student_id)
        if current is None or current.status != expected:
            return None
        updated = TrainingProfile.model_validate({**current.model_dump(), **data})
        self.profiles[student_id] = updated
        return updated

    async def set_threshold(self, student_id: int, threshold: float) -> Optional[TrainingProfile]:
        current = self.profiles.get(student_id)
        if current is None:
            return None
        self.profiles[student_id] = current.model_copy(update={"threshold": threshold})
        return self.profiles[student_id]


class _FakeStorage(SignatureStorage):
    def __init__(self) -> None:
        super().__init__(bucket="signatures", folder="signatures")
        self.objects: Dict[str, bytes] = {}
        self.fail_upload = False

    async def upload(self, path: str, content: bytes, content_type: str) -> None:
        if self.fail_upload:
            raise PersistenceError("bucket unavailable", operation="storage.upload")
        self.objects[path] = content

    async def remove(self, path: str) -> bool:
        return self.objects.pop(path, None) is not None

    def public_url(self, path: str) -> str:
        return f"http://storage.test/{self.bucket}/{path}"


# ============================================================
# Recognition backend and comparator
# ============================================================

class _FakeRecognition:
    def __init__(self) -> None:
        self.healthy = True
        self.train_outcome = TrainingOutcome(success=True, sample_count=5, centroid=[0.1, 0.2], threshold=0.75)
        self.train_error: Optional[Exception] = None
        self.train_gate: Optional[asyncio.Event] = None
        self.train_started: Optional[asyncio.Event] = None
        self.verify_result = BackendVerification(
            success=True, match=True, identity_id=1, score=0.91, decision=Decision.MATCH, message="ok"
        )
        self.verify_error: Optional[Exception] = None
        self.train_calls: List[int] = []
        self.verify_calls = 0

    async def train(self, student_id: int) -> TrainingOutcome:
        self.train_calls.append(student_id)
        if self.train_started is not None:
            self.train_started.set()
        if self.train_gate is not None:
            await self.train_gate.wait()
        if self.train_error is not None:
            raise self.train_error
        return self.train_outcome

    async def verify(self, content, media_type="image/png", file_name="signature.png", session_id=None):
        self.verify_calls += 1
        if self.verify_error is not None:
            raise self.verify_error
        return self.verify_result

    async def health(self) -> HealthStatus:
        return HealthStatus(healthy=self.healthy, status="healthy" if self.healthy else "error")


class _FakeComparator(SignatureComparator):
    name = "fake"

    def __init__(self, default: float = 0.0) -> None:
        self.default = default
        self.scores: Dict[int, float] = {}
        self.error: Optional[Exception] = None
        self.compared: List[tuple] = []

    async def compare(self, probe, candidate) -> float:
        self.compared.append((probe.id, candidate.id))
        if self.error is not None:
            raise self.error
        return self.scores.get(candidate.id, self.default)


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def png() -> bytes:
    return make_png()


@pytest.fixture
def signatures_repo():
    return _FakeSignaturesRepo()


@pytest.fixture
def students_repo():
    return _FakeStudentsRepo()


@pytest.fixture
def training_repo():
    return _FakeTrainingRepo()


@pytest.fixture
def storage():
    return _FakeStorage()


@pytest.fixture
def recognition():
    return _FakeRecognition()


@pytest.fixture
def comparator():
    return _FakeComparator()


@pytest.fixture
def tracker(training_repo, recognition):
    return TrainingProfileTracker(training_repo, recognition, default_threshold=0.70)


@pytest.fixture
def gallery(signatures_repo, students_repo, storage, tracker):
    return SignatureGalleryStore(signatures_repo, students_repo, storage, tracker=tracker)


@pytest.fixture
def engine(gallery, tracker, recognition, comparator):
    return VerificationEngine(gallery, tracker, recognition, comparator, default_threshold=0.70)


@pytest.fixture
def unavailable():
    return RecognitionUnavailableError("Recognition service timed out during train", operation="train")
