"""Fixtures for HTTP tests.

The app runs on the in-memory store with the scheduler off unless a test
turns it on, so every test starts from an empty store.
"""

import pytest
from fastapi.testclient import TestClient

from src.core.container import get_memory_store, reset_container
from src.main import create_app


@pytest.fixture
def api_env(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "testing")
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("SCHEDULER_ENABLED", "false")
    reset_container()
    yield monkeypatch
    reset_container()


@pytest.fixture
def client(api_env):
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def api_store(api_env):
    """The store the app serves from."""
    return get_memory_store()
