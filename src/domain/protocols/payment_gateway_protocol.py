"""PaymentGatewayProtocol - Port for the payment collaborator.

Only the outcomes matter to the engine: an order to pay against, and a
refund transaction id. Gateway wire protocols and signature verification
live in the adapter.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from src.core.errors import DomainError
from src.core.result import Result
from src.domain.entities.payment import Payment
from src.domain.enums import PaymentGateway


@dataclass(frozen=True, slots=True, kw_only=True)
class GatewayOrder:
    """Order created at the gateway.

    Attributes:
        order_id: Gateway order identifier.
        gateway: Gateway that created it.
    """

    order_id: str
    gateway: PaymentGateway


class PaymentGatewayProtocol(Protocol):
    """Payment gateway port."""

    async def create_order(
        self,
        *,
        amount: Decimal,
        currency: str,
        receipt: str,
    ) -> Result[GatewayOrder, DomainError]:
        """Create an order the user will pay against."""
        ...

    async def refund(
        self,
        *,
        payment: Payment,
        amount: Decimal,
        idempotency_key: str,
    ) -> Result[str, DomainError]:
        """Pay back ``amount`` of a completed payment.

        Repeated calls with the same ``idempotency_key`` pay out once.

        Returns:
            Success(refund_transaction_id) or Failure(error).
        """
        ...
