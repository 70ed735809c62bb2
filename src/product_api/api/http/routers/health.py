"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.product_api.api.http.deps import get_database_service
from src.product_api.core.services import DbSessionService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Basic health check endpoint - checks if app is running.

    This is a liveness probe that returns 200 OK as long as the application
    process is running. It does not check dependencies.
    """
    return {"status": "healthy", "service": "api"}


@router.get("/ready", response_model=None)
async def readiness(
    database_service: DbSessionService = Depends(get_database_service),
) -> dict[str, Any] | JSONResponse:
    """Readiness check - returns 503 when the product store is unreachable."""
    db_healthy = database_service.health_check()
    response = {
        "status": "ready" if db_healthy else "not_ready",
        "checks": {
            "database": {
                "status": "healthy" if db_healthy else "unhealthy",
                "type": database_service.engine.dialect.name,
            }
        },
    }

    if not db_healthy:
        return JSONResponse(status_code=503, content=response)
    return response


@router.get("/database", response_model=None)
async def health_database(
    database_service: DbSessionService = Depends(get_database_service),
) -> dict[str, Any] | JSONResponse:
    """Database-specific health check with connection pool status."""
    healthy = database_service.health_check()
    content = {
        "status": "healthy" if healthy else "unhealthy",
        "type": database_service.engine.dialect.name,
        "pool": database_service.get_pool_status(),
    }
    if not healthy:
        return JSONResponse(status_code=503, content=content)
    return content
