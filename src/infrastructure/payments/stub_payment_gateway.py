"""Stub payment gateway.

Creates orders and pays out refunds without talking to a real gateway.
Used in development, tests and the in-memory deployment. Failures can be
injected per operation to exercise the settlement and refund error paths.

Implements PaymentGatewayProtocol via structural typing (no inheritance).
"""

from decimal import Decimal

from uuid_extensions import uuid7

from src.core.enums import ErrorCode
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import Payment
from src.domain.enums import PaymentGateway
from src.domain.errors import PaymentError
from src.domain.protocols import GatewayOrder
from src.infrastructure.enums import InfrastructureErrorCode
from src.infrastructure.errors import ExternalServiceError


class StubPaymentGateway:
    """In-process payment gateway.

    Attributes:
        gateway: Gateway name reported on orders.
        fail_orders: Make ``create_order`` fail.
        refund_error: When set, ``refund`` fails with this message.
        orders: Created orders as (order_id, amount, currency, receipt).
        refunds: Paid-out refunds by idempotency key.
    """

    def __init__(self, gateway: PaymentGateway = PaymentGateway.RAZORPAY) -> None:
        self.gateway = gateway
        self.fail_orders = False
        self.refund_error: str | None = None
        self.orders: list[tuple[str, Decimal, str, str]] = []
        self.refunds: dict[str, tuple[str, Decimal]] = {}

    async def create_order(
        self,
        *,
        amount: Decimal,
        currency: str,
        receipt: str,
    ) -> Result[GatewayOrder, DomainError]:
        """Create an order.

        Returns:
            Success(GatewayOrder): New order.
            Failure(ExternalServiceError): Injected failure or invalid amount.
        """
        if self.fail_orders:
            return Failure(error=_gateway_error("Order creation unavailable"))
        if amount <= 0:
            return Failure(error=_gateway_error(PaymentError.INVALID_AMOUNT))

        order_id = f"order_{uuid7().hex}"
        self.orders.append((order_id, amount, currency, receipt))
        return Success(value=GatewayOrder(order_id=order_id, gateway=self.gateway))

    async def refund(
        self,
        *,
        payment: Payment,
        amount: Decimal,
        idempotency_key: str,
    ) -> Result[str, DomainError]:
        """Pay out a refund once per idempotency key.

        Returns:
            Success(str): Refund transaction id (same id for a repeated key).
            Failure(ExternalServiceError): Injected failure or amount too large.
        """
        if idempotency_key in self.refunds:
            return Success(value=self.refunds[idempotency_key][0])
        if self.refund_error is not None:
            return Failure(error=_gateway_error(self.refund_error))
        if amount <= 0 or amount > payment.amount:
            return Failure(error=_gateway_error("Refund amount exceeds the captured amount"))

        transaction_id = f"rfnd_{uuid7().hex}"
        self.refunds[idempotency_key] = (transaction_id, amount)
        return Success(value=transaction_id)


def _gateway_error(message: str) -> ExternalServiceError:
    return ExternalServiceError(
        code=ErrorCode.PAYMENT_GATEWAY_FAILED,
        message=f"{PaymentError.GATEWAY_FAILED}: {message}",
        infrastructure_code=InfrastructureErrorCode.EXTERNAL_SERVICE_ERROR,
        service_name="payment_gateway",
    )
