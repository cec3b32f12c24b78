"""RunTransitions command handler.

Operator-triggered sweep, outside the scheduler's interval. The sweep itself
is idempotent, so an extra run never repeats a transition.
"""

from src.application.commands.handlers.reconcile_counts_handler import MAINTENANCE_REQUIRED
from src.application.commands.maintenance_commands import RunTransitions
from src.application.dtos import SweepReport
from src.application.errors import forbidden
from src.application.services.status_transition_service import StatusTransitionService
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.enums import Capability
from src.domain.policies import has_capability
from src.domain.protocols import LoggerProtocol


class RunTransitionsHandler:
    """Handler for out-of-band sweeps."""

    def __init__(self, service: StatusTransitionService, logger: LoggerProtocol) -> None:
        self._service = service
        self._logger = logger

    async def handle(self, cmd: RunTransitions) -> Result[SweepReport, DomainError]:
        """Handle RunTransitions command."""
        if not has_capability(cmd.actor, Capability.RUN_MAINTENANCE):
            return Failure(error=forbidden(MAINTENANCE_REQUIRED, Capability.RUN_MAINTENANCE))

        self._logger.info("transitions_triggered", actor_id=str(cmd.actor.user_id))
        report = await self._service.run_all_transitions()
        return Success(value=report)
