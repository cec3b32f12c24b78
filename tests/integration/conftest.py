"""Fixtures for SQL repository integration tests.

Each test gets a fresh SQLite file database (aiosqlite) with all lifecycle
tables created, and the SQL repository bundle on top of it.
"""

import pytest_asyncio

from src.domain.protocols import Repositories
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.repositories import build_sql_repositories


@pytest_asyncio.fixture
async def database(tmp_path):
    """Fresh database per test."""
    db = Database(database_url=f"sqlite+aiosqlite:///{tmp_path / 'lifecycle.db'}")
    await db.create_all()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def sql_repos(database: Database) -> Repositories:
    return build_sql_repositories(database)
