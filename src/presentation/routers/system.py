"""System router for non-versioned application endpoints.

Root and health endpoints. Side-effect free, used by load balancers and
container health checks.
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from src.core.config import get_settings
from src.core.container import get_database

system_router = APIRouter(tags=["System"])


@system_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint - service name and version."""
    settings = get_settings()
    return {
        "message": settings.app_name,
        "status": "operational",
        "version": settings.app_version,
    }


@system_router.get("/health")
async def health(request: Request) -> JSONResponse:
    """Health check endpoint for monitoring and load balancers.

    Reports the store backend, database reachability (SQL backend only)
    and whether the transition scheduler is running. Answers 503 when the
    database is unreachable.
    """
    settings = get_settings()
    database_ok = True
    if settings.storage_backend == "sql":
        database_ok = await get_database().check_connection()

    scheduler = getattr(request.app.state, "scheduler", None)
    return JSONResponse(
        status_code=status.HTTP_200_OK if database_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if database_ok else "unhealthy",
            "storage_backend": settings.storage_backend,
            "database": "ok" if database_ok else "unreachable",
            "scheduler": "running" if scheduler is not None and scheduler.running else "stopped",
        },
    )
