from fastapi import HTTPException
from datetime import datetime, timezone
from typing import Optional
import uuid

from core.constants import ErrorMessages


class APIException(HTTPException):
    """Custom API exception with enhanced error details"""

    def __init__(
        self,
        status_code: int,
        message: str = ErrorMessages.GENERIC,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **kwargs
    ):
        self.message = message
        self.detail = detail or message
        self.error_code = error_code or f"ERR_{status_code}"
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.timestamp = datetime.now(timezone.utc).isoformat()

        super().__init__(status_code=status_code, detail=self.detail, **kwargs)


class NotFoundException(APIException):
    """Exception for resource not found errors"""

    def __init__(self, message: str = ErrorMessages.NOT_FOUND, resource: Optional[str] = None):
        self.resource = resource
        super().__init__(
            status_code=404,
            message=message,
            error_code="NOT_FOUND"
        )


class DatabaseException(APIException):
    """Exception for database errors"""

    def __init__(self, message: str = "Database error occurred"):
        super().__init__(
            status_code=500,
            message=message,
            error_code="DATABASE_ERROR"
        )


class ExternalServiceException(APIException):
    """Exception for review source (Hostaway, Google Places) failures"""

    def __init__(self, message: str = "External service error", service: Optional[str] = None):
        self.service = service
        super().__init__(
            status_code=502,
            message=message,
            error_code="EXTERNAL_SERVICE_ERROR"
        )
