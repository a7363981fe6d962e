"""
Sample validation outcome.
Validation failure is data: the validator never raises for a bad sample.
"""

from typing import Optional
from pydantic import BaseModel


class ValidationOutcome(BaseModel):
    accepted: bool
    reason: Optional[str] = None

    @classmethod
    def accept(cls) -> "ValidationOutcome":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: str) -> "ValidationOutcome":
        return cls(accepted=False, reason=reason)

    @property
    def rejected(self) -> bool:
        return not self.accepted

    class Config:
        frozen = True
