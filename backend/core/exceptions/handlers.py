from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, Dict, Optional
import logging

from core.constants import ErrorMessages
from .api_exceptions import APIException
from .utils import get_correlation_id, format_error_response

logger = logging.getLogger(__name__)


def _error_response(status_code: int, content: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content)


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    """Handle custom API exceptions"""
    if exc.status_code >= 500:
        logger.error(
            f"API error [{exc.correlation_id}] {request.method} {request.url.path}: "
            f"{exc.message} ({exc.detail})"
        )
    details: Optional[str] = exc.detail if exc.detail != exc.message else None
    return _error_response(
        exc.status_code,
        format_error_response(exc.message, details=details),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle standard HTTP exceptions (unknown routes, wrong methods)"""
    return _error_response(
        exc.status_code,
        format_error_response(str(exc.detail)),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing input is reported as 400 with a generic message"""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"][1:]) or str(error["loc"][0])
        errors.append(f"{field}: {error['msg']}")

    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        format_error_response(ErrorMessages.VALIDATION, details="; ".join(errors) or None),
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle SQLAlchemy database errors"""
    correlation_id = get_correlation_id()
    logger.exception(f"Database error [{correlation_id}]: {exc}", exc_info=exc)

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        format_error_response(ErrorMessages.DATABASE),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions"""
    correlation_id = get_correlation_id()
    logger.exception(f"Unexpected error [{correlation_id}]: {exc}", exc_info=exc)

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        format_error_response(ErrorMessages.GENERIC, details=str(exc) or None),
    )
