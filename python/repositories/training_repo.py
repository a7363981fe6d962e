"""
Training repository - handles signature_training_profiles table.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone

from core.config import settings
from repositories.base import BaseRepository
from models.domain.training import TrainingProfile, TrainingStatus


class TrainingRepository(BaseRepository):
    """
    Repository for signature_training_profiles table.
    One row per student, keyed by student_id.
    Status changes go through transition() (compare-and-set on status).
    """

    table_name = "signature_training_profiles"
    model_class = TrainingProfile

    async def get(self, student_id: int) -> Optional[TrainingProfile]:
        try:
            response = self._filtered(self.table.select("*"), {"student_id": student_id}).execute()
            return self._first(response)
        except Exception as e:
            self._handle_error("get", e)

    async def create_if_absent(self, student_id: int, threshold: float) -> TrainingProfile:
        """
        Insert an untrained profile unless one exists. Safe under races:
        the losing insert is ignored by the primary key.
        """
        row = self.client.to_row({
            "student_id": student_id,
            "status": TrainingStatus.UNTRAINED,
            "num_samples": 0,
            "threshold": threshold,
            "updated_at": _now(),
        })
        try:
            self.table.upsert(row, on_conflict="student_id", ignore_duplicates=True).execute()
        except Exception as e:
            self._handle_error("create_if_absent", e)

        return await self.get(student_id)

    async def transition(
        self,
        student_id: int,
        expected: TrainingStatus,
        data: Dict[str, Any]
    ) -> Optional[TrainingProfile]:
        """
        Apply `data` only if the current status is still `expected`.

        Returns:
            Updated profile, or None if the status changed since it was read
        """
        payload = {**data, "updated_at": _now()}

        rows = await self._update_where(
            {"student_id": student_id, "status": expected.value},
            payload,
        )
        return self._to_model(rows[0]) if rows else None

    async def set_threshold(self, student_id: int, threshold: float) -> Optional[TrainingProfile]:
        rows = await self._update_where(
            {"student_id": student_id},
            {"threshold": threshold, "updated_at": _now()},
        )
        return self._to_model(rows[0]) if rows else None

    def _to_model(self, data: Dict) -> TrainingProfile:
        """Convert database row to TrainingProfile model."""
        try:
            status = TrainingStatus(data.get("status") or TrainingStatus.UNTRAINED.value)
        except ValueError:
            self.logger.warning(f"Unknown training status '{data.get('status')}' for student {data.get('student_id')}")
            status = TrainingStatus.ERROR

        return TrainingProfile(
            student_id=data["student_id"],
            status=status,
            num_samples=data.get("num_samples") or 0,
            threshold=data.get("threshold") or settings.default_similarity_threshold,
            embedding_centroid=data.get("embedding_centroid"),
            last_trained_at=data.get("last_trained_at"),
            error_message=data.get("error_message"),
            updated_at=data.get("updated_at"),
        )


def _now() -> datetime:
    return datetime.now(timezone.utc)
