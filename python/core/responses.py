"""
Response envelope shared by every endpoint and the exception handlers.

    {"success": bool, "data": ..., "error": str|null, "code": str|null, "meta": {...}|null}
"""

from typing import TypeVar, Generic, Optional, Any, Dict, List
from fastapi.responses import JSONResponse
from pydantic import BaseModel

T = TypeVar('T')


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    code: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls, data: T = None, meta: Dict[str, Any] = None) -> "ApiResponse[T]":
        return cls(success=True, data=data, meta=meta)

    @classmethod
    def listing(cls, items: List[Any], **meta: Any) -> "ApiResponse":
        """Successful list payload; meta always carries the item count."""
        return cls(success=True, data=items, meta={"total": len(items), **meta})

    @classmethod
    def fail(cls, message: str, code: str = "ERROR", meta: Dict[str, Any] = None) -> "ApiResponse":
        return cls(success=False, error=message, code=code, meta=meta)

    @classmethod
    def from_exception(cls, exc: "AppException") -> "ApiResponse":
        """Error envelope for an AppException; its details become meta."""
        return cls.fail(exc.message, code=exc.code, meta=exc.details or None)

    def to_json_response(self, status_code: int = 200) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=self.model_dump(mode="json"))
