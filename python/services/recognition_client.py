"""
Recognition backend client.

Talks to the external signature recognition service (train / verify / health).
Every call has a bounded timeout; connection failures are retried by the
transport. Timeouts, transport errors and payloads that do not match
models/recognition_schemas.py all surface as RecognitionUnavailableError,
so callers never deal with httpx or the wire format.
"""

from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError as SchemaError

from core.config import settings
from core.exceptions import RecognitionUnavailableError
from core.logging import get_logger
from models.domain.training import TrainingOutcome
from models.domain.verification import BackendVerification, HealthStatus
from models.recognition_schemas import TrainResponse, VerifyResponse, HealthResponse

logger = get_logger(__name__)

S = TypeVar("S", bound=BaseModel)


class RecognitionClient:
    """Async HTTP adapter for the recognition backend."""

    def __init__(
        self,
        base_url: str = None,
        timeout: float = None,
        max_retries: int = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.recognition_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.recognition_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.recognition_max_retries
        self._transport = transport
        logger.info(f"RecognitionClient -> {self.base_url} (timeout={self.timeout}s, retries={self.max_retries})")

    def _client(self) -> httpx.AsyncClient:
        transport = self._transport or httpx.AsyncHTTPTransport(retries=self.max_retries)
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=transport)

    async def _send(self, operation: str, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"[Recognition] {operation} timed out after {self.timeout}s: {e!r}")
            raise RecognitionUnavailableError(
                f"Recognition service timed out during {operation}",
                operation=operation
            )
        except httpx.HTTPError as e:
            logger.warning(f"[Recognition] {operation} transport error: {e!r}")
            raise RecognitionUnavailableError(
                f"Recognition service unreachable during {operation}: {e}",
                operation=operation
            )

    @staticmethod
    def _parse(response: httpx.Response, schema: Type[S], operation: str) -> S:
        try:
            return schema.model_validate(response.json())
        except (ValueError, SchemaError) as e:
            logger.warning(f"[Recognition] {operation} returned malformed payload (HTTP {response.status_code}): {e}")
            raise RecognitionUnavailableError(
                f"Recognition service returned a malformed {operation} response",
                operation=operation
            )

    # ============================================================
    # Operations
    # ============================================================

    async def train(self, student_id: int) -> TrainingOutcome:
        """
        Ask the backend to (re)train a student's profile.

        A non-2xx answer is a backend-reported failure and comes back as
        TrainingOutcome(success=False); it does not raise.
        """
        response = await self._send("train", "POST", f"/train/{student_id}")

        if response.is_error:
            try:
                payload = self._parse(response, TrainResponse, "train")
                reason = payload.error or payload.message
            except RecognitionUnavailableError:
                reason = None
            reason = reason or f"Training request failed (HTTP {response.status_code})"
            logger.warning(f"[Recognition] train {student_id} failed: {reason}")
            return TrainingOutcome(success=False, error=reason)

        payload = self._parse(response, TrainResponse, "train")

        if not payload.success:
            return TrainingOutcome(
                success=False,
                message=payload.message,
                error=payload.error or payload.message or "Training failed",
            )

        profile = payload.profile
        logger.info(
            f"[Recognition] train {student_id} ok: "
            f"samples={profile.num_samples if profile else 0}"
        )
        return TrainingOutcome(
            success=True,
            sample_count=profile.num_samples if profile else 0,
            centroid=profile.embedding_centroid if profile else None,
            threshold=profile.threshold if profile else None,
            trained_at=profile.last_trained_at if profile else None,
            message=payload.message,
        )

    async def verify(
        self,
        content: bytes,
        media_type: str = "image/png",
        file_name: str = "signature.png",
        session_id: Optional[int] = None,
    ) -> BackendVerification:
        """
        Classify a probe signature against all trained profiles.
        """
        data = {"session_id": str(session_id)} if session_id is not None else None
        response = await self._send(
            "verify",
            "POST",
            "/verify",
            files={"file": (file_name, content, media_type)},
            data=data,
        )

        if response.is_error:
            logger.warning(f"[Recognition] verify failed with HTTP {response.status_code}")
            raise RecognitionUnavailableError(
                f"Verification request failed (HTTP {response.status_code})",
                operation="verify"
            )

        payload = self._parse(response, VerifyResponse, "verify")

        identity_id = payload.predicted_student_id
        if identity_id is None and payload.predicted_student is not None:
            identity_id = payload.predicted_student.id

        return BackendVerification(
            success=payload.success,
            match=payload.match,
            identity_id=identity_id,
            predicted_student=payload.predicted_student,
            score=payload.score,
            decision=payload.decision,
            message=payload.error or payload.message,
        )

    async def health(self) -> HealthStatus:
        """Healthy iff HTTP 200 and status == "healthy". Never raises."""
        try:
            response = await self._send("health", "GET", "/health")
            payload = self._parse(response, HealthResponse, "health")
        except RecognitionUnavailableError:
            return HealthStatus(healthy=False, status="error")

        return HealthStatus(
            healthy=response.status_code == 200 and payload.status == "healthy",
            status=payload.status,
        )


# Global instance
_recognition_client: Optional[RecognitionClient] = None


def get_recognition_client() -> RecognitionClient:
    """Get singleton RecognitionClient instance."""
    global _recognition_client
    if _recognition_client is None:
        _recognition_client = RecognitionClient()
    return _recognition_client
