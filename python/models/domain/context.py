"""
Caller context passed explicitly into every signature operation.
"""

from typing import Optional
from pydantic import BaseModel


class CallerContext(BaseModel):
    """Who is calling. Built per request from the bearer token."""

    user_id: Optional[str] = None
    email: Optional[str] = None
    role: str = "anonymous"

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def label(self) -> str:
        """Short form for log lines."""
        return self.email or self.user_id or self.role

    class Config:
        frozen = True


ANONYMOUS = CallerContext()
