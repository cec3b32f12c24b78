"""
Main FastAPI application entry point.

Lifespan:
- Startup: create tables (SQL backend), start the transition scheduler
  (first sweep runs immediately, then every ``sweep_interval_seconds``)
- Shutdown: stop the scheduler, dispose the database engine
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.core.config import get_settings
from src.core.container import build_scheduler, get_database, get_logger
from src.presentation.routers import system_router
from src.presentation.routers.api.middleware.trace_middleware import TraceMiddleware
from src.presentation.routers.api.v1 import v1_router
from src.presentation.routers.api.v1.errors import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application lifetime.
    """
    settings = get_settings()
    logger = get_logger()

    if settings.storage_backend == "sql":
        await get_database().create_all()

    app.state.scheduler = None
    if settings.scheduler_enabled:
        app.state.scheduler = build_scheduler()
        app.state.scheduler.start()

    logger.info(
        "application_started",
        environment=settings.environment.value,
        storage_backend=settings.storage_backend,
        scheduler_enabled=settings.scheduler_enabled,
    )

    yield

    if app.state.scheduler is not None:
        await app.state.scheduler.stop()
    if settings.storage_backend == "sql":
        await get_database().close()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Build the FastAPI application from current settings."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Event, registration and payment lifecycle engine",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Wire trace middleware (request correlation)
    app.add_middleware(TraceMiddleware)

    # Register global exception handlers (RFC 7807 error responses)
    register_exception_handlers(app)

    app.include_router(system_router)
    app.include_router(v1_router)
    return app


app = create_app()
