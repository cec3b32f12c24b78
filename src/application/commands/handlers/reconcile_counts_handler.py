"""ReconcileRegisteredCounts command handler.

Rewrites ``registered_count`` from the registration set for one event or
for every event. Only registrations that hold a counted spot are included
(confirmed, and pending ones that are not waiting for payment). Idempotent
and safe to run while the system is live.
"""

from src.application.commands.maintenance_commands import ReconcileRegisteredCounts
from src.application.dtos import CountReconciliation, ReconcileResult
from src.application.errors import event_not_found, forbidden, persistence_failed
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.enums import Capability
from src.domain.policies import has_capability
from src.domain.protocols import EventRepository, LoggerProtocol

MAINTENANCE_REQUIRED = "Maintenance capability required"


class ReconcileCountsHandler:
    """Handler for counter reconciliation."""

    def __init__(self, event_repo: EventRepository, logger: LoggerProtocol) -> None:
        self._event_repo = event_repo
        self._logger = logger

    async def handle(
        self,
        cmd: ReconcileRegisteredCounts,
    ) -> Result[ReconcileResult, DomainError]:
        """Handle ReconcileRegisteredCounts command.

        Returns:
            Success(ReconcileResult): Per-event previous/current counters.
            Failure(AuthorizationError): Caller lacks the maintenance capability.
            Failure(NotFoundError): The named event does not exist.
        """
        if not has_capability(cmd.actor, Capability.RUN_MAINTENANCE):
            return Failure(error=forbidden(MAINTENANCE_REQUIRED, Capability.RUN_MAINTENANCE))

        result = ReconcileResult()
        try:
            if cmd.event_id is not None:
                event_ids = [cmd.event_id]
            else:
                event_ids = await self._event_repo.find_ids()

            for event_id in event_ids:
                counts = await self._event_repo.recount(event_id)
                if counts is None:
                    if cmd.event_id is not None:
                        return Failure(error=event_not_found(event_id))
                    continue  # deleted while reconciling
                previous, current = counts
                item = CountReconciliation(event_id=event_id, previous=previous, current=current)
                result.events.append(item)
                if item.updated:
                    self._logger.warning(
                        "registered_count_drift_repaired",
                        event_id=str(event_id),
                        previous=previous,
                        current=current,
                    )
        except Exception as e:
            self._logger.error("registered_count_reconcile_failed", error=e)
            return Failure(error=persistence_failed(e))

        self._logger.info(
            "registered_counts_reconciled",
            updated=result.updated,
            unchanged=result.unchanged,
        )
        return Success(value=result)
