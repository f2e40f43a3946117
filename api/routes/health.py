"""Health check endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from api.dependencies import DatabaseDep, get_settings
from core.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class InfoResponse(BaseModel):
    name: str
    version: str
    environment: str


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=settings.app_version)


@router.get("/health/ready")
async def readiness_check(db: DatabaseDep):
    """Readiness check for load balancers."""
    try:
        await db.ping()
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database is not reachable", extra={"error": str(e)})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": "down"},
        )
    return {"status": "ready", "database": "up"}


@router.get("/info", response_model=InfoResponse)
async def info(settings: Settings = Depends(get_settings)):
    return InfoResponse(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.app_env,
    )
