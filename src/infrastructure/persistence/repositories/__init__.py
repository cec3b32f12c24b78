"""Repository implementations (adapters for hexagonal architecture).

This package contains SQLAlchemy implementations of the repository
protocols defined in the domain layer. Every method opens its own
transaction through the session factory it was built with.
"""

from src.domain.protocols import Repositories
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.repositories.event_repository import EventRepository
from src.infrastructure.persistence.repositories.payment_repository import (
    InvoiceRepository,
    PaymentRepository,
    RefundRepository,
)
from src.infrastructure.persistence.repositories.registration_repository import (
    RegistrationRepository,
)
from src.infrastructure.persistence.repositories.team_repository import TeamRepository


def build_sql_repositories(database: Database) -> Repositories:
    """Repository bundle backed by ``database``."""
    session_factory = database.get_session
    return Repositories(
        events=EventRepository(session_factory),
        registrations=RegistrationRepository(session_factory),
        teams=TeamRepository(session_factory),
        payments=PaymentRepository(session_factory),
        refunds=RefundRepository(session_factory),
        invoices=InvoiceRepository(session_factory),
    )


__all__ = [
    "EventRepository",
    "InvoiceRepository",
    "PaymentRepository",
    "RefundRepository",
    "RegistrationRepository",
    "TeamRepository",
    "build_sql_repositories",
]
