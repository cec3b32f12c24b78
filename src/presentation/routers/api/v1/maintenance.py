"""Maintenance router.

Operator endpoints. Both require the RUN_MAINTENANCE capability (admin and
super admin roles).

Endpoints:
    POST /api/v1/maintenance/transitions       - Run one transition sweep now
    POST /api/v1/maintenance/reconcile-counts  - Recompute registered_count
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from src.application.commands.handlers.reconcile_counts_handler import (
    ReconcileCountsHandler,
)
from src.application.commands.handlers.run_transitions_handler import (
    RunTransitionsHandler,
)
from src.application.commands.maintenance_commands import (
    ReconcileRegisteredCounts,
    RunTransitions,
)
from src.core.container import get_reconcile_counts_handler, get_run_transitions_handler
from src.core.result import Failure, Success
from src.domain.value_objects import Actor
from src.presentation.routers.api.middleware.actor_dependencies import get_actor
from src.presentation.routers.api.middleware.trace_middleware import get_trace_id
from src.presentation.routers.api.v1.errors import ErrorResponseBuilder, ProblemDetails
from src.schemas.maintenance_schemas import (
    ReconcileCountsRequest,
    ReconcileCountsResponse,
    SweepReportResponse,
)

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


@router.post(
    "/transitions",
    status_code=status.HTTP_200_OK,
    response_model=SweepReportResponse,
    responses={
        401: {"description": "Caller not identified"},
        403: {"description": "Maintenance capability required", "model": ProblemDetails},
    },
    summary="Run status transitions now",
    description=(
        "Runs the six sweep steps once, in order: events to ongoing, events to "
        "completed, rounds to active, rounds to completed, payment timeouts, "
        "waitlist promotion. A failing step is reported, not raised."
    ),
)
async def run_transitions(
    request: Request,
    actor: Actor = Depends(get_actor),
    handler: RunTransitionsHandler = Depends(get_run_transitions_handler),
) -> SweepReportResponse | JSONResponse:
    result = await handler.handle(RunTransitions(actor=actor))

    match result:
        case Success(value=report):
            return SweepReportResponse.from_report(report)
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, get_trace_id())


@router.post(
    "/reconcile-counts",
    status_code=status.HTTP_200_OK,
    response_model=ReconcileCountsResponse,
    responses={
        401: {"description": "Caller not identified"},
        403: {"description": "Maintenance capability required", "model": ProblemDetails},
        404: {"description": "Event not found", "model": ProblemDetails},
    },
    summary="Recompute registered counts",
    description=(
        "Recounts registrations holding a spot and rewrites drifted "
        "registered_count values. Without a body every event is repaired."
    ),
)
async def reconcile_counts(
    request: Request,
    data: ReconcileCountsRequest | None = None,
    actor: Actor = Depends(get_actor),
    handler: ReconcileCountsHandler = Depends(get_reconcile_counts_handler),
) -> ReconcileCountsResponse | JSONResponse:
    """Repair counters of one event (``event_id``) or of every event."""
    command = ReconcileRegisteredCounts(
        actor=actor,
        event_id=data.event_id if data is not None else None,
    )
    result = await handler.handle(command)

    match result:
        case Success(value=reconciled):
            return ReconcileCountsResponse.from_result(reconciled)
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, get_trace_id())
