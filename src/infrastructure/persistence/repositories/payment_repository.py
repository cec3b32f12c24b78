"""Payment, refund and invoice repositories - SQLAlchemy implementation.

``save_if_status`` is a compare-and-set: the UPDATE only matches the row
while it still has the expected status.
"""

from collections.abc import Collection
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update

from src.domain.entities import Invoice, InvoiceItem, Payment, Refund
from src.domain.enums import PaymentGateway, PaymentStatus, RefundStatus
from src.infrastructure.persistence.database import SessionFactory
from src.infrastructure.persistence.models import InvoiceModel, PaymentModel, RefundModel


class PaymentRepository:
    """SQLAlchemy implementation of PaymentRepository protocol."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session = session_factory

    async def find_by_id(self, payment_id: UUID) -> Payment | None:
        async with self._session() as session:
            model = await session.get(PaymentModel, payment_id)
            return _payment_to_domain(model) if model is not None else None

    async def find_by_registrations(
        self,
        registration_ids: Collection[UUID],
        statuses: Collection[PaymentStatus],
    ) -> list[Payment]:
        if not registration_ids:
            return []
        async with self._session() as session:
            stmt = (
                select(PaymentModel)
                .where(
                    PaymentModel.registration_id.in_(list(registration_ids)),
                    PaymentModel.status.in_([s.value for s in statuses]),
                )
                .order_by(PaymentModel.created_at, PaymentModel.id)
            )
            result = await session.execute(stmt)
            return [_payment_to_domain(model) for model in result.scalars().all()]

    async def save(self, payment: Payment) -> None:
        async with self._session() as session:
            await session.merge(_payment_to_model(payment))

    async def save_if_status(self, payment: Payment, expected: PaymentStatus) -> bool:
        async with self._session() as session:
            result = await session.execute(
                update(PaymentModel)
                .where(PaymentModel.id == payment.id, PaymentModel.status == expected.value)
                .values(_payment_values(payment))
            )
            return result.rowcount == 1


class RefundRepository:
    """SQLAlchemy implementation of RefundRepository protocol."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session = session_factory

    async def find_by_id(self, refund_id: UUID) -> Refund | None:
        async with self._session() as session:
            model = await session.get(RefundModel, refund_id)
            return _refund_to_domain(model) if model is not None else None

    async def find_by_payment(self, payment_id: UUID) -> list[Refund]:
        async with self._session() as session:
            stmt = (
                select(RefundModel)
                .where(RefundModel.payment_id == payment_id)
                .order_by(RefundModel.requested_at, RefundModel.id)
            )
            result = await session.execute(stmt)
            return [_refund_to_domain(model) for model in result.scalars().all()]

    async def save(self, refund: Refund) -> None:
        async with self._session() as session:
            await session.merge(_refund_to_model(refund))

    async def save_if_status(self, refund: Refund, expected: RefundStatus) -> bool:
        async with self._session() as session:
            result = await session.execute(
                update(RefundModel)
                .where(RefundModel.id == refund.id, RefundModel.status == expected.value)
                .values(
                    status=refund.status.value,
                    processed_by=refund.processed_by,
                    processed_at=refund.processed_at,
                    rejection_reason=refund.rejection_reason,
                    refund_transaction_id=refund.refund_transaction_id,
                    notes=refund.notes,
                    updated_at=refund.updated_at,
                )
            )
            return result.rowcount == 1


class InvoiceRepository:
    """SQLAlchemy implementation of InvoiceRepository protocol.

    The unique constraint on ``payment_id`` rejects a second invoice for
    the same payment (raises IntegrityError).
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session = session_factory

    async def find_by_payment(self, payment_id: UUID) -> Invoice | None:
        async with self._session() as session:
            result = await session.execute(
                select(InvoiceModel).where(InvoiceModel.payment_id == payment_id)
            )
            model = result.scalar_one_or_none()
            return _invoice_to_domain(model) if model is not None else None

    async def save(self, invoice: Invoice) -> None:
        async with self._session() as session:
            session.add(
                InvoiceModel(
                    id=invoice.id,
                    invoice_number=invoice.invoice_number,
                    user_id=invoice.user_id,
                    event_id=invoice.event_id,
                    registration_id=invoice.registration_id,
                    payment_id=invoice.payment_id,
                    items=[
                        {
                            "description": item.description,
                            "quantity": item.quantity,
                            "unit_price": str(item.unit_price),
                        }
                        for item in invoice.items
                    ],
                    currency=invoice.currency,
                    paid_at=invoice.paid_at,
                    status=invoice.status,
                    created_at=invoice.created_at,
                )
            )


def _payment_values(payment: Payment) -> dict[str, object]:
    return {
        "status": payment.status.value,
        "transaction_id": payment.transaction_id,
        "paid_at": payment.paid_at,
        "failure_reason": payment.failure_reason,
        "refund_amount": payment.refund_amount,
        "refunded_at": payment.refunded_at,
        "updated_at": payment.updated_at,
    }


def _payment_to_model(payment: Payment) -> PaymentModel:
    return PaymentModel(
        id=payment.id,
        user_id=payment.user_id,
        event_id=payment.event_id,
        registration_id=payment.registration_id,
        amount=payment.amount,
        currency=payment.currency,
        gateway=payment.gateway.value,
        order_id=payment.order_id,
        created_at=payment.created_at,
        **_payment_values(payment),
    )


def _payment_to_domain(model: PaymentModel) -> Payment:
    return Payment(
        id=model.id,
        user_id=model.user_id,
        event_id=model.event_id,
        registration_id=model.registration_id,
        amount=Decimal(model.amount),
        currency=model.currency,
        gateway=PaymentGateway(model.gateway),
        order_id=model.order_id,
        status=PaymentStatus(model.status),
        transaction_id=model.transaction_id,
        paid_at=model.paid_at,
        failure_reason=model.failure_reason,
        refund_amount=Decimal(model.refund_amount) if model.refund_amount is not None else None,
        refunded_at=model.refunded_at,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _refund_to_model(refund: Refund) -> RefundModel:
    return RefundModel(
        id=refund.id,
        payment_id=refund.payment_id,
        registration_id=refund.registration_id,
        event_id=refund.event_id,
        user_id=refund.user_id,
        amount=refund.amount,
        original_amount=refund.original_amount,
        refund_percentage=refund.refund_percentage,
        reason=refund.reason,
        requested_at=refund.requested_at,
        status=refund.status.value,
        processed_by=refund.processed_by,
        processed_at=refund.processed_at,
        rejection_reason=refund.rejection_reason,
        refund_transaction_id=refund.refund_transaction_id,
        notes=refund.notes,
        updated_at=refund.updated_at,
    )


def _refund_to_domain(model: RefundModel) -> Refund:
    return Refund(
        id=model.id,
        payment_id=model.payment_id,
        registration_id=model.registration_id,
        event_id=model.event_id,
        user_id=model.user_id,
        amount=Decimal(model.amount),
        original_amount=Decimal(model.original_amount),
        refund_percentage=model.refund_percentage,
        reason=model.reason,
        requested_at=model.requested_at,
        status=RefundStatus(model.status),
        processed_by=model.processed_by,
        processed_at=model.processed_at,
        rejection_reason=model.rejection_reason,
        refund_transaction_id=model.refund_transaction_id,
        notes=model.notes,
        updated_at=model.updated_at,
    )


def _invoice_to_domain(model: InvoiceModel) -> Invoice:
    return Invoice(
        id=model.id,
        invoice_number=model.invoice_number,
        user_id=model.user_id,
        event_id=model.event_id,
        registration_id=model.registration_id,
        payment_id=model.payment_id,
        items=[
            InvoiceItem(
                description=item["description"],
                quantity=int(item["quantity"]),
                unit_price=Decimal(item["unit_price"]),
            )
            for item in model.items
        ],
        currency=model.currency,
        paid_at=model.paid_at,
        status=model.status,
        created_at=model.created_at,
    )
