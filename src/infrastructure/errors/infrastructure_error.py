"""Infrastructure layer error types.

Infrastructure errors represent failures in external systems (payment
gateway). They inherit from DomainError (not Exception) and flow to the
application layer inside ``Failure``.
"""

from dataclasses import dataclass
from typing import Any

from src.core.errors import DomainError
from src.infrastructure.enums import InfrastructureErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class InfrastructureError(DomainError):
    """Base infrastructure error.

    Attributes:
        code: Domain ErrorCode handlers branch on.
        message: Human-readable message.
        infrastructure_code: Original infrastructure error code.
        details: Additional context.
    """

    infrastructure_code: InfrastructureErrorCode | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ExternalServiceError(InfrastructureError):
    """Failure reported by an external service.

    Attributes:
        service_name: Name of the external service (payment_gateway).
    """

    service_name: str
