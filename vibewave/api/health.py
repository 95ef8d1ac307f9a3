"""
Health check endpoints.

Provides liveness and readiness probes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from vibewave.config import settings
from vibewave.services.session_registry import SessionRegistry, get_session_registry

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    candidate_source: str | None = None
    active_sessions: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get("/ready", response_model=HealthResponse)
async def ready(
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> HealthResponse:
    """
    Readiness probe.

    Reports the configured candidate source and the number of live sessions.
    Profile loading is checked lazily on refresh, not here.
    """
    return HealthResponse(
        status="ready",
        candidate_source=settings.candidate_source,
        active_sessions=len(registry),
    )
