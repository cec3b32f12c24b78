"""Registration and team domain error messages."""


class RegistrationError:
    """Registration error constants.

    Error Categories:
        - Eligibility: NOT_OPEN, DEADLINE_PASSED, EVENT_FULL
        - Duplicates: ALREADY_REGISTERED
        - Teams: TEAM_REQUIRED, TEAM_NOT_ALLOWED, TEAM_NOT_LOCKED, ...
        - Cancellation: ALREADY_CANCELLED, TOO_LATE_TO_CANCEL
    """

    # Eligibility
    NOT_OPEN = "Event is not open for registration"
    DEADLINE_PASSED = "Registration deadline has passed"
    EVENT_FULL = "Event is full"

    # Duplicates
    ALREADY_REGISTERED = "Already registered for this event"

    # Teams
    TEAM_REQUIRED = "This event requires team registration"
    TEAM_NOT_ALLOWED = "This is a solo event, team registration not allowed"
    TEAM_NOT_FOUND = "Team not found"
    TEAM_WRONG_EVENT = "Team does not belong to this event"
    TEAM_NOT_LOCKED = "Team must be locked before registration"
    TEAM_SIZE_OUT_OF_BOUNDS = "Team size is outside the event's team size bounds"
    NOT_TEAM_LEADER = "Only the team leader can register the team"

    # Cancellation
    ALREADY_CANCELLED = "Registration already cancelled"
    TOO_LATE_TO_CANCEL = "Cannot cancel registration less than 24 hours before event"
    PAYMENT_TIMEOUT = "Payment not completed within 24 hours"

    # Review
    NOT_AWAITING_APPROVAL = "Registration is not awaiting approval"
    CANNOT_REGISTER = "Not authorized to register for events"
    CANCELLED_BY_USER = "Cancelled by user"
    STALE_STATE = "Registration changed concurrently, retry the operation"

    # Lookup / ownership
    NOT_FOUND = "Registration not found"
    NOT_OWNER = "Not authorized to modify this registration"


class TeamError:
    """Team construction and membership error constants."""

    INVALID_NAME = "Team name must be between 2 and 100 characters"
    INVALID_MAX_SIZE = "Team max size must be at least 1"
    TOO_MANY_MEMBERS = "Team members exceed maximum size"
    INVALID_INVITE_CODE = "Invite code must be 6 uppercase characters"
    NOT_ACTIVE = "Team is not accepting changes"
    ALREADY_MEMBER = "User is already a team member"
    NOT_MEMBER = "User is not a team member"
    LEADER_CANNOT_LEAVE = "The team leader cannot leave the team"
    FULL = "Team is full"

    # Team commands
    TEAMS_NOT_ALLOWED = "This event does not allow team registration"
    ALREADY_IN_TEAM = "User is already part of a team for this event"
    INVITE_CODE_NOT_FOUND = "Invalid invite code"
    ONLY_LEADER_CAN_LOCK = "Only the team leader can lock the team"
    ALREADY_LOCKED = "Team is already locked"
    BELOW_MIN_SIZE = "Team has fewer members than the event requires"
    STALE_STATE = "Team changed concurrently, retry the operation"
