"""
Global exception handlers.
AppException keeps its own status code and error code; anything else is a 500.
"""

from fastapi import FastAPI, Request

from core.exceptions import AppException
from core.responses import ApiResponse
from core.logging import get_logger, log_error

logger = get_logger(__name__)


async def app_exception_handler(request: Request, exc: AppException):
    logger.warning(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return ApiResponse.from_exception(exc).to_json_response(exc.status_code)


async def generic_exception_handler(request: Request, exc: Exception):
    """Log the traceback; never leak internals to the caller."""
    log_error(logger, exc, context=f"{request.method} {request.url.path}")
    return ApiResponse.fail("Internal server error", code="INTERNAL_ERROR").to_json_response(500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
