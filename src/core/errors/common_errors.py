"""Common error classes shared by every layer.

Error Types:
- ValidationError: malformed input, violated windows/sizes, locked fields
- NotFoundError: referenced entity does not exist
- ConflictError: illegal transition, duplicates, double requests
- AuthorizationError: caller lacks ownership or capability

Usage:
    from src.core.errors import ValidationError
    from src.core.enums import ErrorCode
    from src.core.result import Failure

    return Failure(error=ValidationError(
        code=ErrorCode.INVALID_DATE_RANGE,
        message="End date must be after start date",
        field="end_date_time",
    ))
"""

from dataclasses import dataclass

from src.core.errors.domain_error import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationError(DomainError):
    """Input validation failure.

    Attributes:
        field: Field that failed validation. When several fields fail at
            once, ``details`` maps each field name to its message.
    """

    field: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class NotFoundError(DomainError):
    """Resource not found.

    Attributes:
        resource_type: Type of resource (Event, Registration, ...).
        resource_id: Identifier that was looked up.
    """

    resource_type: str
    resource_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ConflictError(DomainError):
    """Resource conflict (illegal transition, duplicate, double request).

    Attributes:
        resource_type: Type of resource in conflict.
        conflicting_field: Field in conflict (status, payment_status, ...).
    """

    resource_type: str
    conflicting_field: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class AuthorizationError(DomainError):
    """Caller is not allowed to perform the operation.

    Attributes:
        required_permission: Capability that was required, if any.
    """

    required_permission: str | None = None
