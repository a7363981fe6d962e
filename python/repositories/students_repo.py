"""
Students repository - the single column of the students table this service owns.
"""

from typing import Optional

from repositories.base import BaseRepository


class StudentsRepository(BaseRepository):
    """
    Repository for students.primary_signature_id.
    Student CRUD belongs to the attendance application.
    """

    table_name = "students"

    async def get_primary_signature_id(self, student_id: int) -> Optional[int]:
        """Explicitly designated primary signature, if any."""
        try:
            response = self._filtered(
                self.table.select("primary_signature_id"),
                {"id": student_id},
            ).execute()
        except Exception as e:
            self._handle_error("get_primary_signature_id", e)

        if not response.data:
            return None
        return response.data[0].get("primary_signature_id")

    async def compare_and_set_primary(
        self,
        student_id: int,
        expected: Optional[int],
        signature_id: int
    ) -> bool:
        """
        Set primary_signature_id only if it still equals `expected`
        (None = currently unset).

        Returns:
            True if the row was updated
        """
        rows = await self._update_where(
            {"id": student_id, "primary_signature_id": expected},
            {"primary_signature_id": signature_id},
        )
        return bool(rows)
