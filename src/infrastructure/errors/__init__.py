"""Infrastructure errors package.

Usage:
    from src.infrastructure.errors import ExternalServiceError
"""

from src.infrastructure.errors.infrastructure_error import (
    ExternalServiceError,
    InfrastructureError,
)

__all__ = [
    "ExternalServiceError",
    "InfrastructureError",
]
