"""
Health routes for the inboxstream service.
"""

from datetime import datetime, timezone

import httpx
from fastapi import APIRouter
from loguru import logger
from pydantic import BaseModel

from inboxstream.infrastructure import get_postgres_client, get_settings
from inboxstream.infrastructure.mcp import get_mcp_registry

router = APIRouter()


# ============================================================================
# Response Models
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response with service status."""

    status: str
    timestamp: str
    services: dict[str, str]


# ============================================================================
# Health Endpoints
# ============================================================================


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app_version,
    )


@router.get("/health/ready", response_model=ReadinessResponse, tags=["health"])
async def readiness_check() -> ReadinessResponse:
    """Readiness check with service connectivity status."""
    services: dict[str, str] = {}

    # Check PostgreSQL
    try:
        postgres = get_postgres_client()
        health = await postgres.health_check()
        services["postgres"] = health.get("status", "unknown")
    except Exception as e:
        logger.warning(f"PostgreSQL health check failed: {e}")
        services["postgres"] = f"error: {str(e)[:50]}"

    # Check MCP servers
    async with httpx.AsyncClient(timeout=5.0) as client:
        for server in get_mcp_registry().enabled():
            try:
                response = await client.get(server.health_url)
                services[f"mcp:{server.name}"] = "healthy" if response.status_code < 400 else "unhealthy"
            except httpx.HTTPError as e:
                logger.warning(f"MCP server {server.name} health check failed: {e}")
                services[f"mcp:{server.name}"] = f"error: {str(e)[:50]}"

    status = "ready" if services.get("postgres") == "healthy" else "degraded"

    return ReadinessResponse(
        status=status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        services=services,
    )


@router.get("/health/live", tags=["health"])
async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness probe endpoint."""
    return {"status": "alive"}
