"""
Error types raised by the service.
Each carries the HTTP status and machine code the API reports for it.
"""

from typing import Optional, Dict, Any


class AppException(Exception):
    """
    Root of the hierarchy. `details` is surfaced as the response meta,
    so keep it to ids and field names.
    """

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# === Gallery Errors ===

class NotMemberError(AppException):
    """Signature does not belong to the identity's gallery."""

    def __init__(self, identity_id: int, signature_id: int):
        super().__init__(
            message=f"Signature {signature_id} is not in the gallery of student {identity_id}",
            code="NOT_MEMBER",
            status_code=404,
            details={"student_id": identity_id, "signature_id": signature_id}
        )


# === Validation Errors ===

class ValidationError(AppException):
    """Input validation failed."""

    def __init__(self, message: str, field: str = None, code: str = "VALIDATION_ERROR"):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code=code,
            status_code=422,
            details=details
        )


class InvalidSampleError(ValidationError):
    def __init__(self, reason: str):
        super().__init__(message=reason, field="file", code="INVALID_SAMPLE")


# === Database / Storage Errors ===

class DatabaseError(AppException):
    """Database operation failed."""

    def __init__(self, message: str, operation: str = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=f"Database error: {message}",
            code="DATABASE_ERROR",
            status_code=500,
            details=details
        )


class PersistenceError(AppException):
    """Sample could not be persisted; no partial artifacts remain."""

    def __init__(self, message: str, operation: str = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=message,
            code="PERSISTENCE_ERROR",
            status_code=500,
            details=details
        )


# === Recognition Errors ===

class RecognitionUnavailableError(AppException):
    """Recognition backend unreachable, timed out or answered with a malformed payload."""

    def __init__(self, message: str, operation: str = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=message,
            code="RECOGNITION_UNAVAILABLE",
            status_code=503,
            details=details
        )


# === Training Errors ===

class TrainingInProgressError(AppException):
    """A training request is already in flight for this identity."""

    def __init__(self, identity_id: int):
        super().__init__(
            message=f"Training already in progress for student {identity_id}",
            code="TRAINING_IN_PROGRESS",
            status_code=409,
            details={"student_id": identity_id}
        )


# === Authentication Errors ===

class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_ERROR",
            status_code=401
        )


class InvalidTokenError(AuthenticationError):
    def __init__(self):
        super().__init__(message="Invalid or expired token")
