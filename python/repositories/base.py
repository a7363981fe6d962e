"""
Base repository with common functionality.

All queries go through PostgREST filters built by `_filtered`; a filter value
of None means IS NULL. Conditional writes (`_update_where`) are how the
service does compare-and-set without database functions.
"""

from typing import Optional, List, Dict, Any, TypeVar, Generic
from pydantic import BaseModel

from core.exceptions import AppException, DatabaseError
from core.logging import get_logger

T = TypeVar('T', bound=BaseModel)


class BaseRepository(Generic[T]):
    """
    Base repository over one Supabase table.

    Subclasses set `table_name` (and `model_class`, or override `_to_model`).
    """

    table_name: str = None
    model_class: type = None

    def __init__(self, supabase_client):
        """
        Args:
            supabase_client: SupabaseClient instance (from infrastructure/)
        """
        self.client = supabase_client
        self.logger = get_logger(f"repo.{self.__class__.__name__}")

    @property
    def table(self):
        return self.client.table(self.table_name)

    # ============================================================
    # Generic Operations
    # ============================================================

    async def get_by_id(self, id: Any) -> Optional[T]:
        try:
            response = self._filtered(self.table.select("*"), {"id": id}).execute()
            return self._first(response)
        except Exception as e:
            self._handle_error("get_by_id", e)

    async def count(self, filters: Dict[str, Any] = None) -> int:
        """Exact row count for the filters."""
        try:
            query = self._filtered(self.table.select("id", count="exact"), filters)
            return query.execute().count or 0
        except Exception as e:
            self._handle_error("count", e)

    async def create(self, data: Dict[str, Any]) -> T:
        """Insert one row and return it as a model."""
        try:
            response = self.table.insert(self.client.to_row(data)).execute()
            if not response.data:
                raise DatabaseError("Insert returned no data", operation=f"{self.table_name}.create")
            return self._to_model(response.data[0])
        except Exception as e:
            self._handle_error("create", e)

    async def _update_where(self, filters: Dict[str, Any], data: Dict[str, Any]) -> List[Dict]:
        """
        UPDATE ... WHERE <filters>. Returns the updated rows;
        an empty list means no row matched (the precondition failed).
        """
        try:
            query = self._filtered(self.table.update(self.client.to_row(data)), filters)
            return query.execute().data or []
        except Exception as e:
            self._handle_error("update", e)

    # ============================================================
    # Helper Methods
    # ============================================================

    @staticmethod
    def _filtered(query, filters: Optional[Dict[str, Any]]):
        for key, value in (filters or {}).items():
            query = query.is_(key, "null") if value is None else query.eq(key, value)
        return query

    def _first(self, response) -> Optional[T]:
        return self._to_model(response.data[0]) if response.data else None

    def _to_model(self, data: Dict) -> T:
        """
        Convert database row to model instance.
        Override in subclasses for custom transformation.
        """
        if self.model_class is None:
            return data
        return self.model_class(**data)

    def _handle_error(self, operation: str, error: Exception):
        """Log and re-raise as DatabaseError; application errors pass through."""
        if isinstance(error, AppException):
            raise error
        self.logger.error(f"{self.table_name}.{operation} failed: {error}")
        raise DatabaseError(str(error), operation=f"{self.table_name}.{operation}")
