"""Domain protocols (ports) for hexagonal architecture.

Protocols define the interfaces the application layer depends on.
Infrastructure implements them without inheriting from them.

Usage:
    from src.domain.protocols import EventRepository, NotificationSinkProtocol
"""

from src.domain.protocols.clock_protocol import ClockProtocol
from src.domain.protocols.event_repository import EventRepository
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.notification_protocol import NotificationSinkProtocol
from src.domain.protocols.payment_gateway_protocol import (
    GatewayOrder,
    PaymentGatewayProtocol,
)
from src.domain.protocols.payment_repository import (
    InvoiceRepository,
    PaymentRepository,
    RefundRepository,
)
from src.domain.protocols.registration_repository import (
    AddOutcome,
    RegistrationChange,
    RegistrationRepository,
)
from src.domain.protocols.repositories import Repositories
from src.domain.protocols.team_repository import TeamRepository

__all__ = [
    "AddOutcome",
    "ClockProtocol",
    "EventRepository",
    "GatewayOrder",
    "InvoiceRepository",
    "LoggerProtocol",
    "NotificationSinkProtocol",
    "PaymentGatewayProtocol",
    "PaymentRepository",
    "RefundRepository",
    "RegistrationChange",
    "RegistrationRepository",
    "Repositories",
    "TeamRepository",
]
