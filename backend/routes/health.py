# Health check endpoints for orchestrators and load balancers

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from core.database import get_db_health

router = APIRouter(prefix="/health", tags=["health"])

SERVICE_NAME = "reviews-api"


@router.get("/live")
async def liveness_check():
    """
    Basic liveness check - returns 200 if the service is running
    """
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME
    }


@router.get("/ready")
async def readiness_check():
    """
    Readiness check - returns 200 when the database answers, 503 otherwise
    """
    db_health = await get_db_health()
    ready = db_health.get("status") == "healthy"

    response_data = {
        "status": "ready" if ready else "not_ready",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "checks": {"database": db_health},
    }
    return JSONResponse(content=response_data, status_code=200 if ready else 503)
