"""Administrative approval state of an event."""

from enum import Enum


class ApprovalStatus(str, Enum):
    """Approval state assigned by administrators."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
