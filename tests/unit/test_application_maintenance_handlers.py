"""Unit tests for RunTransitionsHandler and ReconcileCountsHandler."""

import pytest
from uuid_extensions import uuid7

from src.application.commands import ReconcileRegisteredCounts, RunTransitions
from src.application.commands.handlers.reconcile_counts_handler import (
    MAINTENANCE_REQUIRED,
    ReconcileCountsHandler,
)
from src.application.commands.handlers.run_transitions_handler import RunTransitionsHandler
from src.application.services.status_transition_service import STEP_ORDER
from src.core.enums import ErrorCode
from src.core.errors import AuthorizationError
from src.core.result import Success
from src.domain.enums import RegistrationStatus, UserRole
from tests.conftest import make_actor, make_event, make_registration, seed


@pytest.mark.unit
class TestRunTransitions:
    """Out-of-band sweep trigger."""

    async def test_admin_runs_sweep(self, transition_service, mock_logger, admin):
        """Test an admin gets the full sweep report."""
        handler = RunTransitionsHandler(transition_service, mock_logger)

        result = await handler.handle(RunTransitions(actor=admin))

        assert isinstance(result, Success)
        assert tuple(step.name for step in result.value.steps) == STEP_ORDER

    @pytest.mark.parametrize("role", [UserRole.STUDENT, UserRole.FACULTY])
    async def test_non_admin_forbidden(self, transition_service, mock_logger, role):
        """Test only maintenance roles may trigger a sweep."""
        handler = RunTransitionsHandler(transition_service, mock_logger)

        result = await handler.handle(RunTransitions(actor=make_actor(role)))

        assert isinstance(result.error, AuthorizationError)
        assert result.error.message == MAINTENANCE_REQUIRED


@pytest.mark.unit
class TestReconcileCounts:
    """Counter repair."""

    @pytest.fixture
    def handler(self, repos, mock_logger):
        return ReconcileCountsHandler(repos.events, mock_logger)

    async def test_repairs_drift(self, handler, store, admin, mock_logger):
        """Test a drifted counter is rewritten from counted registrations."""
        event = make_event(is_paid=True)
        seed(
            store,
            event,
            make_registration(event),
            make_registration(event, status=RegistrationStatus.PENDING),
            make_registration(event, status=RegistrationStatus.CANCELLED),
        )
        store.events[event.id].registered_count = 7

        result = await handler.handle(ReconcileRegisteredCounts(actor=admin))

        item = result.value.events[0]
        assert (item.previous, item.current, item.updated) == (7, 1, True)
        assert store.events[event.id].registered_count == 1
        assert mock_logger.warning.call_args.args[0] == "registered_count_drift_repaired"

    async def test_correct_counters_unchanged(self, handler, store, admin):
        """Test reconciliation is idempotent."""
        first, second = make_event(), make_event()
        seed(store, first, second, make_registration(first))

        result = await handler.handle(ReconcileRegisteredCounts(actor=admin))

        assert result.value.updated == 0
        assert result.value.unchanged == 2

    async def test_single_event(self, handler, store, admin):
        """Test one named event is reconciled alone."""
        first, second = make_event(), make_event()
        seed(store, first, second)

        result = await handler.handle(ReconcileRegisteredCounts(actor=admin, event_id=second.id))

        assert [item.event_id for item in result.value.events] == [second.id]

    async def test_unknown_event(self, handler, admin):
        """Test naming a missing event is not found."""
        result = await handler.handle(ReconcileRegisteredCounts(actor=admin, event_id=uuid7()))

        assert result.error.code == ErrorCode.EVENT_NOT_FOUND

    async def test_student_forbidden(self, handler, student):
        """Test students cannot reconcile."""
        result = await handler.handle(ReconcileRegisteredCounts(actor=student))

        assert result.error.code == ErrorCode.PERMISSION_DENIED
