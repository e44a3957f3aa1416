from typing import Any, Dict, Optional
import uuid


def get_correlation_id() -> str:
    """Generate a new correlation ID"""
    return str(uuid.uuid4())


def format_error_response(
    error: str,
    details: Optional[str] = None,
    **kwargs
) -> Dict[str, Any]:
    """Format the standard failure envelope"""
    content: Dict[str, Any] = {"success": False, "error": error}
    if details:
        content["details"] = details
    content.update(kwargs)
    return content
