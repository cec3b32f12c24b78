"""Unit tests for domain policies.

Tests cover:
- Refund tiers (7+ days full, 3+ days half, otherwise rejected)
- Refund amount rounding
- Capacity predicates and spots_available
- Role capabilities and event management rights
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from src.core.enums import ErrorCode
from src.core.errors import ValidationError
from src.core.result import Failure, Success
from src.domain.enums import (
    Capability,
    RegistrationPaymentStatus,
    RegistrationStatus,
    UserRole,
)
from src.domain.errors import RefundError
from src.domain.policies import (
    PAYMENT_DUE_STATES,
    ROLE_CAPABILITIES,
    RefundPolicy,
    can_manage_event,
    has_capability,
    occupies_capacity,
    spots_available,
)
from tests.conftest import BASE_TIME, make_actor, make_event


@pytest.mark.unit
class TestRefundPolicy:
    """Refund percentage tiers."""

    @pytest.fixture
    def policy(self) -> RefundPolicy:
        return RefundPolicy()

    @pytest.mark.parametrize(
        ("days_before", "expected"),
        [
            (30, 100),
            (7, 100),
            (6.99, 50),
            (3, 50),
        ],
    )
    def test_percentage_tiers(self, policy, days_before, expected):
        """Test full refund from seven days out and half from three."""
        start = BASE_TIME + timedelta(days=days_before)

        result = policy.percentage_for(start, BASE_TIME)

        assert result == Success(value=expected)

    @pytest.mark.parametrize("days_before", [2.99, 1, 0, -1])
    def test_too_close_is_rejected(self, policy, days_before):
        """Test requests under three days out (or after start) are refused."""
        start = BASE_TIME + timedelta(days=days_before)

        result = policy.percentage_for(start, BASE_TIME)

        assert isinstance(result, Failure)
        assert isinstance(result.error, ValidationError)
        assert result.error.code == ErrorCode.REFUND_WINDOW_CLOSED
        assert result.error.message == RefundError.TOO_CLOSE_TO_EVENT

    def test_custom_tiers(self):
        """Test tiers are configurable."""
        policy = RefundPolicy(full_refund_days=14, partial_refund_days=1)
        start = BASE_TIME + timedelta(days=10)

        assert policy.percentage_for(start, BASE_TIME) == Success(value=50)

    def test_tiers_out_of_order_raise(self):
        """Test the partial tier cannot exceed the full tier."""
        with pytest.raises(ValueError):
            RefundPolicy(full_refund_days=2, partial_refund_days=5)

    @pytest.mark.parametrize(
        ("amount", "percentage", "expected"),
        [
            (Decimal("500.00"), 100, Decimal("500.00")),
            (Decimal("500.00"), 50, Decimal("250.00")),
            (Decimal("99.99"), 50, Decimal("50.00")),
            (Decimal("10.00"), 0, Decimal("0.00")),
        ],
    )
    def test_refund_amount(self, amount, percentage, expected):
        """Test refund amounts round half up to cents."""
        assert RefundPolicy.refund_amount(amount, percentage) == expected

    def test_refund_amount_rejects_bad_percentage(self):
        """Test percentages outside 0..100 raise."""
        with pytest.raises(ValueError, match=RefundError.INVALID_PERCENTAGE):
            RefundPolicy.refund_amount(Decimal("10"), 120)


@pytest.mark.unit
class TestCapacity:
    """Capacity predicates."""

    def test_failed_payment_still_reserves(self):
        """Test a failed payment keeps the spot reserved for a retry."""
        assert RegistrationPaymentStatus.FAILED in PAYMENT_DUE_STATES
        assert occupies_capacity(RegistrationStatus.PENDING, RegistrationPaymentStatus.FAILED)

    def test_waitlisted_does_not_occupy(self):
        """Test waitlisted registrations never take a spot."""
        assert not occupies_capacity(
            RegistrationStatus.WAITLISTED, RegistrationPaymentStatus.NOT_REQUIRED
        )

    def test_spots_available(self):
        """Test free spots never go negative and unlimited is None."""
        assert spots_available(10, 4, 2) == 4
        assert spots_available(3, 3, 1) == 0
        assert spots_available(None, 50) is None


@pytest.mark.unit
class TestAuthorization:
    """Role capabilities."""

    def test_every_role_has_an_entry(self):
        """Test the capability table covers every role."""
        assert set(ROLE_CAPABILITIES) == set(UserRole)

    def test_student_only_registers(self):
        """Test students register but cannot create events or run maintenance."""
        student = make_actor(UserRole.STUDENT)

        assert has_capability(student, Capability.REGISTER_FOR_EVENTS)
        assert not has_capability(student, Capability.CREATE_EVENTS)
        assert not has_capability(student, Capability.RUN_MAINTENANCE)

    @pytest.mark.parametrize("role", [UserRole.DEPARTMENT_ORGANIZER, UserRole.FACULTY])
    def test_organizer_roles_create_events(self, role):
        """Test organizer roles create events without managing others."""
        actor = make_actor(role)

        assert has_capability(actor, Capability.CREATE_EVENTS)
        assert not has_capability(actor, Capability.MANAGE_ANY_EVENT)

    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.SUPER_ADMIN])
    def test_admin_roles_have_everything(self, role):
        """Test admin roles hold every capability."""
        actor = make_actor(role)

        assert all(has_capability(actor, capability) for capability in Capability)

    def test_can_manage_event(self):
        """Test the organizer and admins manage an event, other organizers do not."""
        event = make_event()
        organizer = make_actor(UserRole.FACULTY, user_id=event.organizer_id)

        assert can_manage_event(organizer, event)
        assert can_manage_event(make_actor(UserRole.ADMIN), event)
        assert not can_manage_event(make_actor(UserRole.FACULTY), event)
