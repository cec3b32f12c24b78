"""Database persistence infrastructure.

This module provides database-related functionality including:
- Base model and column types for lifecycle tables
- Database connection and session management
- SQLAlchemy repositories and the in-memory store
"""

from src.infrastructure.persistence.base import BaseModel
from src.infrastructure.persistence.database import Database, SessionFactory

__all__ = [
    "BaseModel",
    "Database",
    "SessionFactory",
]
