"""
Signatures repository - handles signatures table.
"""

from typing import List, Dict

from repositories.base import BaseRepository
from models.domain.signature import SignatureSample


class SignaturesRepository(BaseRepository):
    """
    Repository for signatures table.
    Rows are never updated after insert.
    """

    table_name = "signatures"
    model_class = SignatureSample

    async def list_by_student(self, student_id: int) -> List[SignatureSample]:
        """
        Get a student's samples, newest first.
        """
        try:
            response = (
                self.table
                .select("*")
                .eq("student_id", student_id)
                .order("created_at", desc=True)
                .order("id", desc=True)
                .execute()
            )
            return [self._to_model(row) for row in response.data]

        except Exception as e:
            self._handle_error("list_by_student", e)

    async def count_by_student(self, student_id: int) -> int:
        return await self.count({"student_id": student_id})

    def _to_model(self, data: Dict) -> SignatureSample:
        """Convert database row to SignatureSample."""
        return SignatureSample(
            id=data["id"],
            student_id=data["student_id"],
            storage_path=data["storage_path"],
            file_name=data.get("file_name") or data["storage_path"].rsplit("/", 1)[-1],
            file_size=data.get("file_size") or 0,
            file_type=data.get("file_type") or "application/octet-stream",
            width=data.get("width"),
            height=data.get("height"),
            features=data.get("features"),
            quality_score=data.get("quality_score"),
            device_info=data.get("device_info") or {},
            created_at=data.get("created_at"),
        )
