"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from modules.auth.interfaces import ISessionService
from modules.auth.models import SessionStatus
from shared.config import Settings

from ..dependencies import get_app_settings, get_session_service

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    session: str


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=settings.app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    session: ISessionService = Depends(get_session_service),
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Not ready while the session is still bootstrapping. A degraded
    session is reported but does not block readiness.
    """
    snapshot = session.snapshot()
    return ReadinessResponse(
        status="starting" if snapshot.loading else "ready",
        session=SessionStatus(snapshot.status).value,
    )
