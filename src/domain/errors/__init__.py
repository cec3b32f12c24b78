"""Domain error message constants.

Usage:
    from src.domain.errors import EventError, RegistrationError
"""

from src.domain.errors.event_error import EventError
from src.domain.errors.payment_error import PaymentError, RefundError
from src.domain.errors.registration_error import RegistrationError, TeamError

__all__ = [
    "EventError",
    "PaymentError",
    "RefundError",
    "RegistrationError",
    "TeamError",
]
