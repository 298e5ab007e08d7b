"""
Health check API routes.

Kubernetes-compatible liveness and readiness probes.
"""

from fastapi import APIRouter, Response, status

from coffre.di.container import get_container
from coffre.domain.clock import utcnow

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_probe():
    """
    Liveness probe endpoint.

    The process is serving requests; no dependency checks.
    """
    return {"status": "healthy", "timestamp": utcnow().isoformat()}


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_probe(response: Response):
    """
    Readiness probe endpoint.

    Returns 200 if the database answers, 503 otherwise.
    """
    container = get_container()
    database_ok = await container.database.health_check()

    if not database_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": "healthy" if database_ok else "unhealthy",
        "timestamp": utcnow().isoformat(),
        "checks": {"database": "ok" if database_ok else "unavailable"},
        "executor": {"pending": container.simulation_executor.pending},
    }


@router.get("", status_code=status.HTTP_200_OK)
async def health_check_endpoint(response: Response):
    """General health check endpoint (alias for readiness)."""
    return await readiness_probe(response)
