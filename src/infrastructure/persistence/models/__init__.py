"""Database models for persistence layer.

This package contains SQLAlchemy database models that map to database
tables. These are infrastructure concerns and should not be imported by the
domain layer.

Models Organization:
    - event.py: EventModel, EventRoundModel
    - team.py: TeamModel
    - registration.py: RegistrationModel
    - payment.py: PaymentModel, RefundModel, InvoiceModel

Note:
    Domain entities (dataclasses) live in src/domain/entities/
    Database models live here in src/infrastructure/persistence/models/
    They are separate and mapped via the repository layer.
"""

from src.infrastructure.persistence.models.event import EventModel, EventRoundModel
from src.infrastructure.persistence.models.payment import (
    InvoiceModel,
    PaymentModel,
    RefundModel,
)
from src.infrastructure.persistence.models.registration import RegistrationModel
from src.infrastructure.persistence.models.team import TeamModel

__all__ = [
    "EventModel",
    "EventRoundModel",
    "InvoiceModel",
    "PaymentModel",
    "RefundModel",
    "RegistrationModel",
    "TeamModel",
]
