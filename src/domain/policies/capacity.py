"""Capacity accounting rules.

``Event.registered_count`` counts registrations that hold a counted spot:
every CONFIRMED registration and every PENDING registration that is not
waiting for payment (it is waiting for organizer approval). A PENDING
registration whose payment is still due (pending, or failed and open to a
retry) reserves a spot without being counted; it is counted from settlement
onward.

Both stores derive counter deltas from ``holds_counted_spot`` evaluated on
the persisted row before and after a status write, so the counter can only
move together with the transition that licenses it. Reconciliation counts
the same predicate.
"""

from src.domain.enums import RegistrationPaymentStatus, RegistrationStatus

PAYMENT_DUE_STATES: frozenset[RegistrationPaymentStatus] = frozenset(
    {RegistrationPaymentStatus.PENDING, RegistrationPaymentStatus.FAILED}
)


def holds_counted_spot(
    status: RegistrationStatus,
    payment_status: RegistrationPaymentStatus,
) -> bool:
    """Check whether a registration is included in ``registered_count``."""
    if status == RegistrationStatus.CONFIRMED:
        return True
    return status == RegistrationStatus.PENDING and payment_status not in PAYMENT_DUE_STATES


def is_awaiting_payment(
    status: RegistrationStatus,
    payment_status: RegistrationPaymentStatus,
) -> bool:
    """Check whether a registration reserves a spot pending settlement."""
    return status == RegistrationStatus.PENDING and payment_status in PAYMENT_DUE_STATES


def occupies_capacity(
    status: RegistrationStatus,
    payment_status: RegistrationPaymentStatus,
) -> bool:
    """Counted or reserved: the spot is not free for anyone else."""
    return holds_counted_spot(status, payment_status) or is_awaiting_payment(
        status, payment_status
    )


def spots_available(
    max_participants: int | None,
    registered_count: int,
    awaiting_payment: int = 0,
) -> int | None:
    """Free spots left, or None for unlimited events.

    Args:
        max_participants: Capacity, None for unlimited.
        registered_count: Counted spots.
        awaiting_payment: Reserved spots still waiting for settlement.

    Returns:
        Non-negative number of free spots, None when unlimited.
    """
    if max_participants is None:
        return None
    return max(0, max_participants - registered_count - awaiting_payment)
