"""Payment, refund and invoice repository protocols (ports).

``save_if_status`` is a compare-and-set write used where two requests may
race on the same record (duplicate settlement callbacks, double refund
processing): only the caller that observed the stored status wins.
"""

from collections.abc import Collection
from typing import Protocol
from uuid import UUID

from src.domain.entities.invoice import Invoice
from src.domain.entities.payment import Payment
from src.domain.entities.refund import Refund
from src.domain.enums import PaymentStatus, RefundStatus


class PaymentRepository(Protocol):
    """Payment persistence port."""

    async def find_by_id(self, payment_id: UUID) -> Payment | None:
        """Find payment by ID."""
        ...

    async def find_by_registrations(
        self,
        registration_ids: Collection[UUID],
        statuses: Collection[PaymentStatus],
    ) -> list[Payment]:
        """Payments for any of the registrations in the given statuses."""
        ...

    async def save(self, payment: Payment) -> None:
        """Create or update a payment."""
        ...

    async def save_if_status(self, payment: Payment, expected: PaymentStatus) -> bool:
        """Write ``payment`` only if the stored status equals ``expected``.

        Returns:
            True if written.
        """
        ...


class RefundRepository(Protocol):
    """Refund persistence port."""

    async def find_by_id(self, refund_id: UUID) -> Refund | None:
        """Find refund by ID."""
        ...

    async def find_by_payment(self, payment_id: UUID) -> list[Refund]:
        """Every refund requested against a payment."""
        ...

    async def save(self, refund: Refund) -> None:
        """Create or update a refund."""
        ...

    async def save_if_status(self, refund: Refund, expected: RefundStatus) -> bool:
        """Write ``refund`` only if the stored status equals ``expected``."""
        ...


class InvoiceRepository(Protocol):
    """Invoice persistence port."""

    async def find_by_payment(self, payment_id: UUID) -> Invoice | None:
        """Invoice issued for a payment."""
        ...

    async def save(self, invoice: Invoice) -> None:
        """Store an invoice."""
        ...
