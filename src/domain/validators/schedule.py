"""Event, round and settings validation.

Validators are pure functions returning ``Result[None, ValidationError]``.
Errors are collected per field so the caller sees every problem at once:
``error.details`` maps field name to message and ``error.field`` names the
first offending field.

Reference rules:
    - registration_deadline < start_date_time < end_date_time
    - event.start <= round.start < round.end <= event.end
    - 1 <= min_team_size <= max_team_size
    - paid events have amount > 0
    - round progression stays within 1..total and moves forward
"""

from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from src.core.enums import ErrorCode
from src.core.errors import ValidationError
from src.core.result import Failure, Result, Success
from src.domain.errors import EventError


def _collect(
    errors: dict[str, str],
    code: ErrorCode,
    message: str,
) -> Result[None, ValidationError]:
    if not errors:
        return Success(value=None)
    return Failure(
        error=ValidationError(
            code=code,
            message=message,
            field=next(iter(errors)),
            details=errors,
        )
    )


def validate_event_schedule(
    registration_deadline: datetime,
    start_date_time: datetime,
    end_date_time: datetime,
) -> Result[None, ValidationError]:
    """Validate the event scheduling window.

    Args:
        registration_deadline: Last moment registrations are accepted.
        start_date_time: Event start.
        end_date_time: Event end.

    Returns:
        Success(None): Window is valid.
        Failure(ValidationError): Errors keyed ``end_date_time`` and/or
            ``registration_deadline``.
    """
    errors: dict[str, str] = {}
    if end_date_time <= start_date_time:
        errors["end_date_time"] = EventError.END_BEFORE_START
    if registration_deadline >= start_date_time:
        errors["registration_deadline"] = EventError.DEADLINE_NOT_BEFORE_START
    return _collect(errors, ErrorCode.INVALID_DATE_RANGE, EventError.INVALID_SCHEDULE)


def validate_round_window(
    event_start: datetime,
    event_end: datetime,
    round_start: datetime,
    round_end: datetime,
) -> Result[None, ValidationError]:
    """Validate that a round lies inside its event's window.

    Returns:
        Success(None): ``event_start <= round_start < round_end <= event_end``.
        Failure(ValidationError): Errors keyed ``start_date`` / ``end_date``.
    """
    errors: dict[str, str] = {}
    if round_start < event_start:
        errors["start_date"] = EventError.ROUND_BEFORE_EVENT
    if round_end > event_end:
        errors["end_date"] = EventError.ROUND_AFTER_EVENT
    if round_end <= round_start:
        errors["end_date"] = EventError.ROUND_END_BEFORE_START
    message = (
        EventError.ROUND_END_BEFORE_START
        if round_end <= round_start
        else EventError.ROUND_OUTSIDE_EVENT
    )
    return _collect(errors, ErrorCode.INVALID_ROUND_WINDOW, message)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_team_size(min_team_size: int, max_team_size: int) -> Result[None, ValidationError]:
    """Validate team size bounds (integers, min >= 1, max >= min)."""
    errors: dict[str, str] = {}
    if not _is_int(min_team_size) or min_team_size < 1:
        errors["min_team_size"] = EventError.MIN_TEAM_SIZE_TOO_SMALL
    elif not _is_int(max_team_size) or max_team_size < min_team_size:
        errors["max_team_size"] = EventError.MAX_TEAM_SIZE_BELOW_MIN
    return _collect(errors, ErrorCode.INVALID_TEAM_SIZE, EventError.INVALID_TEAM_SIZE)


def validate_payment_settings(
    is_paid: bool,
    amount: Decimal | None,
) -> Result[None, ValidationError]:
    """Paid events need a strictly positive amount."""
    if is_paid and (amount is None or amount <= 0):
        return Failure(
            error=ValidationError(
                code=ErrorCode.INVALID_PAYMENT_SETTINGS,
                message=EventError.AMOUNT_REQUIRED,
                field="amount",
                details={"amount": EventError.AMOUNT_REQUIRED},
            )
        )
    return Success(value=None)


def validate_capacity(max_participants: int | None) -> Result[None, ValidationError]:
    """Capacity is unlimited (None) or at least one."""
    if max_participants is not None and max_participants < 1:
        return Failure(
            error=ValidationError(
                code=ErrorCode.VALIDATION_FAILED,
                message=EventError.INVALID_MAX_PARTICIPANTS,
                field="max_participants",
                details={"max_participants": EventError.INVALID_MAX_PARTICIPANTS},
            )
        )
    return Success(value=None)


def validate_eligible_years(years: Iterable[int]) -> Result[None, ValidationError]:
    """Eligible years are study years 1 through 5."""
    if any(not 1 <= year <= 5 for year in years):
        return Failure(
            error=ValidationError(
                code=ErrorCode.VALIDATION_FAILED,
                message=EventError.INVALID_ELIGIBLE_YEARS,
                field="eligible_years",
                details={"eligible_years": EventError.INVALID_ELIGIBLE_YEARS},
            )
        )
    return Success(value=None)


def validate_round_progression(
    from_round: int,
    to_round: int,
    total_rounds: int,
) -> Result[None, ValidationError]:
    """Validate a move of participants between 1-based round numbers."""
    errors: dict[str, str] = {}
    if not 1 <= from_round <= total_rounds:
        errors["from_round"] = f"{EventError.FROM_ROUND_OUT_OF_RANGE} (1..{total_rounds})"
    if not 1 <= to_round <= total_rounds:
        errors["to_round"] = f"{EventError.TO_ROUND_OUT_OF_RANGE} (1..{total_rounds})"
    if to_round <= from_round:
        errors["to_round"] = EventError.TO_ROUND_NOT_AFTER_FROM
    return _collect(
        errors,
        ErrorCode.INVALID_ROUND_PROGRESSION,
        "Round progression validation failed",
    )


def merge_validations(
    *results: Result[None, ValidationError],
) -> Result[None, ValidationError]:
    """Merge several validation results into one.

    Returns:
        Success(None) if all succeeded, otherwise a single ValidationError
        whose details merge the details of every failure.
    """
    failures = [result.error for result in results if isinstance(result, Failure)]
    if not failures:
        return Success(value=None)
    if len(failures) == 1:
        return Failure(error=failures[0])
    merged: dict[str, str] = {}
    for error in failures:
        merged.update(error.details or {})
    return Failure(
        error=ValidationError(
            code=ErrorCode.VALIDATION_FAILED,
            message="; ".join(error.message for error in failures),
            field=failures[0].field,
            details=merged,
        )
    )
