"""
Core package: settings, errors, the response envelope and logging.

- config.py     environment-driven Settings (pydantic-settings)
- exceptions.py AppException hierarchy with HTTP status and error code
- responses.py  ApiResponse envelope
- logging.py    setup_logging and lifecycle log helpers
- handlers.py   FastAPI exception handlers
"""

from core.config import settings
from core.exceptions import (
    AppException,
    NotMemberError,
    ValidationError,
    DatabaseError,
    PersistenceError,
    RecognitionUnavailableError,
    TrainingInProgressError,
    AuthenticationError,
)
from core.responses import ApiResponse

__all__ = [
    'settings',
    'AppException',
    'NotMemberError',
    'ValidationError',
    'DatabaseError',
    'PersistenceError',
    'RecognitionUnavailableError',
    'TrainingInProgressError',
    'AuthenticationError',
    'ApiResponse',
]
