"""Event domain error messages.

Message constants for event and round failures. Handlers wrap them in
ValidationError / ConflictError values; entities use them in ValueError for
construction errors.
"""


class EventError:
    """Event error constants.

    Error Categories:
        - Schedule: END_BEFORE_START, DEADLINE_NOT_BEFORE_START, ...
        - Settings: INVALID_TEAM_SIZE, AMOUNT_REQUIRED, ...
        - Editing: FIELDS_LOCKED, DEADLINE_EXTENSION_AFTER_PASSED, ...
        - Rounds: ROUND_BEFORE_EVENT, ROUND_AFTER_EVENT, ...
    """

    # Schedule
    END_BEFORE_START = "End date must be after start date"
    DEADLINE_NOT_BEFORE_START = "Registration deadline must be before event start date"
    INVALID_SCHEDULE = "Event schedule is invalid"

    # Settings
    EMPTY_TITLE = "Event title is required"
    INVALID_TEAM_SIZE = "Team size bounds are invalid"
    MIN_TEAM_SIZE_TOO_SMALL = "Minimum team size must be an integer of at least 1"
    MAX_TEAM_SIZE_BELOW_MIN = "Maximum team size must be greater than or equal to minimum team size"
    AMOUNT_REQUIRED = "Amount must be greater than 0 for paid events"
    INVALID_MAX_PARTICIPANTS = "Maximum participants must be at least 1"
    INVALID_ELIGIBLE_YEARS = "Eligible years must be between 1 and 5"
    NEGATIVE_REGISTERED_COUNT = "Registered count cannot be negative"

    # Editing
    FIELDS_LOCKED = "Cannot modify locked fields after the event has started"
    DEADLINE_EXTENSION_AFTER_PASSED = "Cannot extend registration deadline after it has passed"
    CAPACITY_BELOW_REGISTERED = "Cannot reduce maximum participants below current registrations"
    UNKNOWN_FIELD = "Field cannot be edited"
    HAS_ACTIVE_REGISTRATIONS = "Event has active registrations and cannot be deleted"
    CLOSED = "Cannot modify a completed or cancelled event"
    NOT_AUTHORIZED = "Not authorized to manage this event"
    CANNOT_CREATE = "Not authorized to create events"

    # Rounds
    ROUND_BEFORE_EVENT = "Round cannot start before event starts"
    ROUND_AFTER_EVENT = "Round cannot end after event ends"
    ROUND_END_BEFORE_START = "Round end date must be after start date"
    ROUND_OUTSIDE_EVENT = "Round window must lie within the event window"
    ROUND_NOT_FOUND = "Round not found"
    ROUND_NOT_EDITABLE = "Only upcoming rounds can be edited"
    NOT_IN_ROUND = "Selected registrations are not active participants of the round"
    ROUND_NOT_COMPLETED = "Current round must be completed before advancing participants"
    NEXT_ROUND_MISSING = "Next round does not exist"
    FROM_ROUND_OUT_OF_RANGE = "From round is out of range"
    TO_ROUND_OUT_OF_RANGE = "To round is out of range"
    TO_ROUND_NOT_AFTER_FROM = "To round must be after from round"

    # Lookup
    NOT_FOUND = "Event not found"
