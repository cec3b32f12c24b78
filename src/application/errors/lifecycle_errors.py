"""Error constructors shared by lifecycle handlers.

Handlers return these as ``Failure(error=...)``; nothing here raises.

Usage:
    from src.application.errors import event_not_found

    event = await self._event_repo.find_by_id(cmd.event_id)
    if event is None:
        return Failure(error=event_not_found(cmd.event_id))
"""

from uuid import UUID

from src.core.enums import ErrorCode
from src.core.errors import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from src.domain.entities import Event, Team
from src.domain.enums import Capability
from src.domain.errors import EventError, PaymentError, RefundError, RegistrationError, TeamError


def event_not_found(event_id: UUID) -> NotFoundError:
    """Referenced event does not exist."""
    return NotFoundError(
        code=ErrorCode.EVENT_NOT_FOUND,
        message=EventError.NOT_FOUND,
        resource_type="Event",
        resource_id=str(event_id),
    )


def registration_not_found(registration_id: UUID) -> NotFoundError:
    """Referenced registration does not exist."""
    return NotFoundError(
        code=ErrorCode.REGISTRATION_NOT_FOUND,
        message=RegistrationError.NOT_FOUND,
        resource_type="Registration",
        resource_id=str(registration_id),
    )


def team_not_found(team_id: UUID) -> NotFoundError:
    """Referenced team does not exist."""
    return NotFoundError(
        code=ErrorCode.TEAM_NOT_FOUND,
        message=RegistrationError.TEAM_NOT_FOUND,
        resource_type="Team",
        resource_id=str(team_id),
    )


def payment_not_found(payment_id: UUID) -> NotFoundError:
    """Referenced payment does not exist."""
    return NotFoundError(
        code=ErrorCode.PAYMENT_NOT_FOUND,
        message=PaymentError.NOT_FOUND,
        resource_type="Payment",
        resource_id=str(payment_id),
    )


def refund_not_found(refund_id: UUID) -> NotFoundError:
    """Referenced refund does not exist."""
    return NotFoundError(
        code=ErrorCode.REFUND_NOT_FOUND,
        message=RefundError.NOT_FOUND,
        resource_type="Refund",
        resource_id=str(refund_id),
    )


def forbidden(message: str, capability: Capability | None = None) -> AuthorizationError:
    """Caller lacks the capability, or does not own the resource."""
    return AuthorizationError(
        code=ErrorCode.PERMISSION_DENIED if capability else ErrorCode.RESOURCE_NOT_OWNED,
        message=message,
        required_permission=capability.value if capability else None,
    )


def stale_state(resource_type: str, field: str = "status") -> ConflictError:
    """A compare-and-set write lost against a concurrent change."""
    return ConflictError(
        code=ErrorCode.RESOURCE_CONFLICT,
        message=RegistrationError.STALE_STATE,
        resource_type=resource_type,
        conflicting_field=field,
    )


def persistence_failed(error: Exception) -> DomainError:
    """Store raised while executing a command."""
    return DomainError(
        code=ErrorCode.PERSISTENCE_FAILED,
        message=f"Database error occurred: {error}",
        details={"error_type": type(error).__name__},
    )


def event_closed(event: Event) -> ConflictError:
    """Change attempted on a completed or cancelled event."""
    return ConflictError(
        code=ErrorCode.INVALID_STATE_TRANSITION,
        message=EventError.CLOSED,
        resource_type="Event",
        conflicting_field="status",
        details={"current": event.status.value},
    )


def team_rule_violation(message: str, team: Team) -> DomainError:
    """Map a refused Team membership change to a handler error."""
    if message == TeamError.NOT_ACTIVE:
        return ConflictError(
            code=ErrorCode.INVALID_STATE_TRANSITION,
            message=message,
            resource_type="Team",
            conflicting_field="status",
            details={"current": team.status.value},
        )
    if message in (TeamError.ALREADY_MEMBER, TeamError.FULL):
        return ConflictError(
            code=ErrorCode.TEAM_FULL if message == TeamError.FULL else ErrorCode.ALREADY_IN_TEAM,
            message=message,
            resource_type="Team",
            conflicting_field="member_ids",
            details={"size": team.size, "max_size": team.max_size},
        )
    return ValidationError(
        code=ErrorCode.VALIDATION_FAILED,
        message=message,
        field="team_id",
    )


def team_changed() -> ConflictError:
    """A team compare-and-set lost against a concurrent membership change."""
    return ConflictError(
        code=ErrorCode.RESOURCE_CONFLICT,
        message=TeamError.STALE_STATE,
        resource_type="Team",
        conflicting_field="member_ids",
    )
