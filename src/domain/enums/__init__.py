"""Domain enums for business logic.

Available Enums:
    - EventStatus, ApprovalStatus, RoundStatus: event lifecycle
    - RegistrationStatus, RegistrationPaymentStatus: registration lifecycle
    - PaymentStatus, PaymentGateway, RefundStatus: money flow
    - TeamStatus: team lifecycle
    - NotificationChannel, NotificationPriority: notification delivery
    - UserRole, Capability: authorization
"""

from src.domain.enums.approval_status import ApprovalStatus
from src.domain.enums.capability import Capability
from src.domain.enums.event_status import EventStatus
from src.domain.enums.notification import NotificationChannel, NotificationPriority
from src.domain.enums.payment_gateway import PaymentGateway
from src.domain.enums.payment_status import PaymentStatus
from src.domain.enums.refund_status import RefundStatus
from src.domain.enums.registration_payment_status import RegistrationPaymentStatus
from src.domain.enums.registration_status import RegistrationStatus
from src.domain.enums.round_status import RoundStatus
from src.domain.enums.team_status import TeamStatus
from src.domain.enums.user_role import UserRole

__all__ = [
    "ApprovalStatus",
    "Capability",
    "EventStatus",
    "NotificationChannel",
    "NotificationPriority",
    "PaymentGateway",
    "PaymentStatus",
    "RefundStatus",
    "RegistrationPaymentStatus",
    "RegistrationStatus",
    "RoundStatus",
    "TeamStatus",
    "UserRole",
]
