"""Domain entities (mutable, have identity).

Usage:
    from src.domain.entities import Event, Registration, Payment
"""

from src.domain.entities.event import Event
from src.domain.entities.invoice import Invoice, InvoiceItem
from src.domain.entities.payment import Payment
from src.domain.entities.refund import Refund
from src.domain.entities.registration import Registration
from src.domain.entities.round import Round
from src.domain.entities.team import Team

__all__ = [
    "Event",
    "Invoice",
    "InvoiceItem",
    "Payment",
    "Refund",
    "Registration",
    "Round",
    "Team",
]
