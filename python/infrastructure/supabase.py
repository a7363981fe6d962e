"""
Supabase connection shared by the repositories, the RPC comparator and
Supabase Storage.

Rows written through PostgREST must be plain JSON; `to_row` converts the
values this service produces (enums, datetimes, numpy feature vectors).
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np
from supabase import create_client, Client

from core.config import settings
from core.exceptions import DatabaseError
from core.logging import get_logger

logger = get_logger(__name__)


class SupabaseClient:
    """Lazily connected wrapper around supabase-py's Client."""

    def __init__(self, url: str = None, key: str = None):
        self._url = url or settings.supabase_url
        self._key = key or settings.supabase_service_role_key
        self._client: Optional[Client] = None
        self._connect()

    def _connect(self):
        try:
            self._client = create_client(self._url, self._key)
        except Exception as e:
            logger.error(f"Supabase connection to {self._url} failed: {e}")
            raise DatabaseError(str(e), operation="connect")
        logger.info(f"Supabase client ready ({self._url})")

    @property
    def client(self) -> Client:
        if self._client is None:
            self._connect()
        return self._client

    # ============================================================
    # Accessors
    # ============================================================

    def table(self, name: str):
        return self.client.table(name)

    def rpc(self, fn: str, params: Dict[str, Any]):
        """Prepared call of a database function; caller runs .execute()."""
        return self.client.rpc(fn, params)

    def bucket(self, name: str):
        return self.client.storage.from_(name)

    # ============================================================
    # Row serialization
    # ============================================================

    @classmethod
    def to_row(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Copy of `data` with every value JSON-serializable."""
        return {key: cls._plain(value) for key, value in data.items()}

    @classmethod
    def _plain(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, np.integer):
            return int(value)
        if isinstance(value, np.floating):
            return float(value)
        if isinstance(value, np.ndarray):
            return value.tolist()
        if isinstance(value, dict):
            return cls.to_row(value)
        if isinstance(value, (list, tuple)):
            return [cls._plain(item) for item in value]
        return value


# ============================================================
# Global Instance
# ============================================================

_supabase_client: Optional[SupabaseClient] = None


def get_supabase_client() -> SupabaseClient:
    global _supabase_client
    if _supabase_client is None:
        _supabase_client = SupabaseClient()
    return _supabase_client
