"""API v1 routers.

Resources:
    /api/v1/maintenance/transitions       - Manual transition sweep
    /api/v1/maintenance/reconcile-counts  - Counter repair
"""

from fastapi import APIRouter

from src.presentation.routers.api.v1.maintenance import router as maintenance_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(maintenance_router)

__all__ = ["maintenance_router", "v1_router"]
