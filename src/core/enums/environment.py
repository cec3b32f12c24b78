"""Runtime environments.

Selects environment-specific behavior such as the log renderer:
- DEVELOPMENT: human-readable console logs, local SQLite database
- TESTING: JSON logs, isolated in-memory stores
- CI: JSON logs
- PRODUCTION: JSON logs, PostgreSQL
"""

from enum import Enum


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    CI = "ci"
    PRODUCTION = "production"
