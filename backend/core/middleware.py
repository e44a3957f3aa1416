import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

from core.logging import structured_logger

CORRELATION_HEADER = "X-Correlation-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one structured entry per request and tags the response with a correlation id."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        request_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        # Health probes are polled constantly
        if not request.url.path.startswith("/health"):
            structured_logger.log_request(
                method=request.method,
                endpoint=request.url.path,
                request_id=request_id,
                duration_ms=duration_ms,
                status_code=response.status_code,
            )

        response.headers[CORRELATION_HEADER] = request_id
        return response
