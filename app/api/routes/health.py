from fastapi import APIRouter, status
from pydantic import BaseModel
from datetime import datetime
from app.config.settings import settings
from app.core.database import check_database
from app.core.timeutils import utcnow

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    environment: str


@router.get("/", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        timestamp=utcnow(),
        version=settings.app_version,
        environment=settings.environment
    )


@router.get("/readiness")
async def readiness_check():
    """Readiness check endpoint"""
    checks = {
        "database": "ok" if check_database() else "unavailable",
        "auth": "enabled" if settings.secret_key else "disabled",
    }

    ready = checks["database"] == "ok"

    return {
        "status": "ready" if ready else "not_ready",
        "checks": checks,
        "timestamp": utcnow()
    }
