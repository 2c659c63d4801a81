from fastapi import APIRouter, Depends, status as http_status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from datetime import datetime, timezone
import logging
import time

from cafeshift import __version__
from cafeshift.core.database import get_db

router = APIRouter()
logger = logging.getLogger(__name__)

# Track server startup time for uptime calculation
SERVER_START_TIME = time.time()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Liveness plus database connectivity.

    Returns:
        - 200 OK: Service is healthy
        - 503 Service Unavailable: Database unreachable
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": {
            "name": "CafeShift API",
            "version": __version__,
            "uptime_seconds": round(time.time() - SERVER_START_TIME, 2),
        },
        "database": {"status": "connected"},
    }
    http_code = http_status.HTTP_200_OK

    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database connection error in health check: {str(e)}", exc_info=True)
        health_status["status"] = "unhealthy"
        health_status["database"] = {"status": "disconnected", "error": str(e)}
        http_code = http_status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(status_code=http_code, content=health_status)
