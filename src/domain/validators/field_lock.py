"""Edit rules for events.

Once an event has started, its structural fields are frozen. An edit that
sends the current value again is not a change; for list fields the
comparison ignores order.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from src.core.enums import ErrorCode
from src.core.errors import ValidationError
from src.core.result import Failure, Result, Success
from src.domain.errors import EventError

if TYPE_CHECKING:
    from src.domain.entities.event import Event

EDITABLE_FIELDS: frozenset[str] = frozenset(
    {
        "title",
        "description",
        "event_type",
        "registration_deadline",
        "start_date_time",
        "end_date_time",
        "min_team_size",
        "max_team_size",
        "is_paid",
        "amount",
        "currency",
        "eligibility",
        "eligible_years",
        "eligible_departments",
        "allow_external_students",
        "requires_approval",
        "max_participants",
    }
)

LOCKED_AFTER_START: frozenset[str] = frozenset(
    {
        "title",
        "event_type",
        "start_date_time",
        "end_date_time",
        "min_team_size",
        "max_team_size",
        "is_paid",
        "amount",
        "eligibility",
        "eligible_years",
        "eligible_departments",
        "allow_external_students",
        "requires_approval",
    }
)


def values_equal(current: Any, proposed: Any) -> bool:
    """Compare field values, treating same-content lists as equal."""
    if isinstance(current, (list, tuple, set, frozenset)) and isinstance(
        proposed, (list, tuple, set, frozenset)
    ):
        try:
            return sorted(current) == sorted(proposed)
        except TypeError:
            return sorted(map(repr, current)) == sorted(map(repr, proposed))
    return bool(current == proposed)


def changed_fields(event: "Event", changes: Mapping[str, Any]) -> dict[str, Any]:
    """Subset of ``changes`` that differs from the event's current values."""
    return {
        name: value
        for name, value in changes.items()
        if not values_equal(getattr(event, name), value)
    }


def validate_edit(
    event: "Event",
    changes: Mapping[str, Any],
    now: datetime,
) -> Result[dict[str, Any], ValidationError]:
    """Check an edit against field editability and locking rules.

    Args:
        event: Event as currently persisted.
        changes: Proposed field values by name.
        now: Evaluation time.

    Returns:
        Success(dict): The fields that actually change.
        Failure(ValidationError): Unknown fields, locked fields (every
            offending field named in ``details``), a deadline extension after
            the deadline passed, or capacity below registered count.
    """
    unknown = sorted(set(changes) - EDITABLE_FIELDS)
    if unknown:
        return Failure(
            error=ValidationError(
                code=ErrorCode.VALIDATION_FAILED,
                message=f"{EventError.UNKNOWN_FIELD}: {', '.join(unknown)}",
                field=unknown[0],
                details={name: EventError.UNKNOWN_FIELD for name in unknown},
            )
        )

    effective = changed_fields(event, changes)

    if event.has_started(now):
        locked = sorted(name for name in effective if name in LOCKED_AFTER_START)
        if locked:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.FIELD_LOCKED,
                    message=f"{EventError.FIELDS_LOCKED}: {', '.join(locked)}",
                    field=locked[0],
                    details={name: EventError.FIELDS_LOCKED for name in locked},
                )
            )

    new_deadline = effective.get("registration_deadline")
    if (
        new_deadline is not None
        and now > event.registration_deadline
        and new_deadline > event.registration_deadline
    ):
        return Failure(
            error=ValidationError(
                code=ErrorCode.VALIDATION_FAILED,
                message=EventError.DEADLINE_EXTENSION_AFTER_PASSED,
                field="registration_deadline",
                details={"registration_deadline": EventError.DEADLINE_EXTENSION_AFTER_PASSED},
            )
        )

    if "max_participants" in effective:
        new_capacity = effective["max_participants"]
        if new_capacity is not None and new_capacity < event.registered_count:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.VALIDATION_FAILED,
                    message=(
                        f"{EventError.CAPACITY_BELOW_REGISTERED} "
                        f"({event.registered_count})"
                    ),
                    field="max_participants",
                    details={"max_participants": EventError.CAPACITY_BELOW_REGISTERED},
                )
            )

    return Success(value=effective)
