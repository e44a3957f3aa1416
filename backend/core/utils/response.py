"""
Response utility for consistent API responses
"""
from typing import Any, Optional, Dict
from fastapi.responses import JSONResponse
from fastapi import status
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime, date


class Response(JSONResponse):
    """
    Standardized API response envelope: {success, data?, error?, details?, pagination?}
    Inherits from JSONResponse to be directly returnable from FastAPI routes
    """

    def __init__(
        self,
        success: bool = True,
        data: Any = None,
        message: Optional[str] = None,
        status_code: int = status.HTTP_200_OK,
        pagination: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
        details: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        response_data: Dict[str, Any] = {"success": success}

        if data is not None:
            response_data["data"] = self._serialize_data(data)

        if message:
            response_data["message"] = message

        if error:
            response_data["error"] = error

        if details:
            response_data["details"] = details

        if pagination:
            response_data["pagination"] = pagination

        if extra:
            response_data.update(self._serialize_data(extra))

        super().__init__(
            content=response_data,
            status_code=status_code,
            **kwargs
        )

    def _serialize_data(self, data: Any) -> Any:
        """
        Convert Pydantic models and other non-serializable objects to JSON-serializable format
        """
        if data is None:
            return None
        elif isinstance(data, BaseModel):
            # Wire format uses the camelCase aliases
            return data.model_dump(mode='json', by_alias=True)
        elif isinstance(data, UUID):
            return str(data)
        elif isinstance(data, (datetime, date)):
            return data.isoformat()
        elif isinstance(data, (list, tuple)):
            return [self._serialize_data(item) for item in data]
        elif isinstance(data, dict):
            return {key: self._serialize_data(value) for key, value in data.items()}
        else:
            return data

    @staticmethod
    def success(
        data: Any = None,
        message: Optional[str] = None,
        status_code: int = status.HTTP_200_OK,
        pagination: Optional[Dict[str, Any]] = None,
        **extra
    ) -> "Response":
        """
        Create a successful response
        """
        return Response(
            success=True,
            data=data,
            message=message,
            status_code=status_code,
            pagination=pagination,
            extra=extra or None
        )

    @staticmethod
    def error(
        error: str = "An error occurred",
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[str] = None
    ) -> "Response":
        """
        Create an error response
        """
        return Response(
            success=False,
            error=error,
            details=details,
            status_code=status_code
        )
