"""Domain validators returning Result values.

Usage:
    from src.domain.validators import validate_event_schedule, validate_edit
"""

from src.domain.validators.field_lock import (
    EDITABLE_FIELDS,
    LOCKED_AFTER_START,
    changed_fields,
    validate_edit,
    values_equal,
)
from src.domain.validators.schedule import (
    merge_validations,
    validate_capacity,
    validate_eligible_years,
    validate_event_schedule,
    validate_payment_settings,
    validate_round_progression,
    validate_round_window,
    validate_team_size,
)

__all__ = [
    "EDITABLE_FIELDS",
    "LOCKED_AFTER_START",
    "changed_fields",
    "merge_validations",
    "validate_capacity",
    "validate_edit",
    "validate_eligible_years",
    "validate_event_schedule",
    "validate_payment_settings",
    "validate_round_progression",
    "validate_round_window",
    "validate_team_size",
    "values_equal",
]
