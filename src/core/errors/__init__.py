"""Core errors package.

Usage:
    from src.core.errors import DomainError, ValidationError, ConflictError
"""

from src.core.errors.common_errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.core.errors.domain_error import DomainError

__all__ = [
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "AuthorizationError",
]
