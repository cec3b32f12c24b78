"""API tests for non-versioned system routes.

Validates behavior of root and health endpoints exposed by the system
router.
"""

import pytest
from fastapi.testclient import TestClient

from src.core.config import get_settings
from src.main import create_app


@pytest.mark.api
def test_root_endpoint_returns_status_and_version(client) -> None:
    """Root endpoint should return operational status and app version."""
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == get_settings().app_name
    assert data["status"] == "operational"
    assert data["version"] == get_settings().app_version


@pytest.mark.api
def test_health_reports_store_and_stopped_scheduler(client) -> None:
    """Health endpoint reports the backend and a stopped scheduler."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "storage_backend": "memory",
        "database": "ok",
        "scheduler": "stopped",
    }


@pytest.mark.api
def test_health_reports_running_scheduler(api_env) -> None:
    """With the scheduler enabled, the sweep loop runs alongside the app."""
    api_env.setenv("SCHEDULER_ENABLED", "true")
    api_env.setenv("SWEEP_INTERVAL_SECONDS", "3600")

    with TestClient(create_app()) as client:
        response = client.get("/health")

    assert response.json()["scheduler"] == "running"


@pytest.mark.api
def test_trace_id_header_round_trip(client) -> None:
    """A caller-supplied trace id is echoed back."""
    response = client.get("/health", headers={"X-Trace-Id": "trace-abc"})

    assert response.headers["X-Trace-Id"] == "trace-abc"


@pytest.mark.api
def test_trace_id_generated(client) -> None:
    """Requests without a trace id get one."""
    response = client.get("/")

    assert response.headers["X-Trace-Id"]
