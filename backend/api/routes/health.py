"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shared.config import get_settings
from shared.exceptions import CoursesError
from ..dependencies import ServiceContainer, get_container

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    database: str
    webhooks: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=get_settings().app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    container: ServiceContainer = Depends(get_container),
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Probes the database with a one-row read and reports whether the
    webhook signing secret is configured.
    """
    try:
        container.gateway.select("courses", {"id": "00000000-0000-0000-0000-000000000000"})
        database = "connected"
    except (CoursesError, RuntimeError) as e:
        logger.warning("Readiness probe failed: %s", e)
        database = "unavailable"

    webhooks = "configured" if container.settings.stripe_webhook_secret else "unconfigured"
    status = "ready" if database == "connected" else "not_ready"
    return ReadinessResponse(status=status, database=database, webhooks=webhooks)
