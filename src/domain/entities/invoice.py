"""Invoice domain entity.

Issued once per completed payment, for the paying user only.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from uuid_extensions import uuid7


@dataclass(frozen=True, slots=True, kw_only=True)
class InvoiceItem:
    """Invoice line (immutable value object)."""

    description: str
    quantity: int
    unit_price: Decimal

    @property
    def total(self) -> Decimal:
        """Line total."""
        return self.unit_price * self.quantity


def generate_invoice_number(now: datetime) -> str:
    """``INV-{epoch millis}``."""
    return f"INV-{int(now.timestamp() * 1000)}"


@dataclass
class Invoice:
    """Record of a completed payment.

    Attributes:
        invoice_number: Human-readable number.
        user_id: Paying user.
        event_id: Event paid for.
        registration_id: Registration paid for.
        payment_id: Settled payment (one invoice per payment).
        items: Line items.
        currency: ISO currency code.
        paid_at: Settlement time.
        id: Unique identifier.
        status: Always "paid".
        created_at: Record creation timestamp.
    """

    invoice_number: str
    user_id: UUID
    event_id: UUID
    registration_id: UUID
    payment_id: UUID
    items: list[InvoiceItem]
    currency: str
    paid_at: datetime
    id: UUID = field(default_factory=uuid7)
    status: str = "paid"
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def subtotal(self) -> Decimal:
        """Sum of line totals."""
        return sum((item.total for item in self.items), Decimal("0"))

    @property
    def total(self) -> Decimal:
        """Amount due (no taxes or discounts are applied)."""
        return self.subtotal
