"""Repository bundle handed to application services.

Both stores expose one ``Repositories`` bundle. Every repository call is
atomic on its own: the in-memory store holds one asyncio lock per call, the
SQLAlchemy store runs each call in its own transaction. Flows spanning
several calls rely on compare-and-set writes, not on a shared transaction.
"""

from dataclasses import dataclass

from src.domain.protocols.event_repository import EventRepository
from src.domain.protocols.payment_repository import (
    InvoiceRepository,
    PaymentRepository,
    RefundRepository,
)
from src.domain.protocols.registration_repository import RegistrationRepository
from src.domain.protocols.team_repository import TeamRepository


@dataclass(frozen=True, slots=True, kw_only=True)
class Repositories:
    """All lifecycle repositories of one store."""

    events: EventRepository
    registrations: RegistrationRepository
    teams: TeamRepository
    payments: PaymentRepository
    refunds: RefundRepository
    invoices: InvoiceRepository
