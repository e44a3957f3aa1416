from .api_exceptions import (
    APIException,
    NotFoundException,
    DatabaseException,
    ExternalServiceException
)

from .handlers import (
    api_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    sqlalchemy_exception_handler,
    general_exception_handler
)

from .utils import (
    get_correlation_id,
    format_error_response
)

__all__ = [
    # Exceptions
    "APIException",
    "NotFoundException",
    "DatabaseException",
    "ExternalServiceException",

    # Handlers
    "api_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "sqlalchemy_exception_handler",
    "general_exception_handler",

    # Utils
    "get_correlation_id",
    "format_error_response"
]
