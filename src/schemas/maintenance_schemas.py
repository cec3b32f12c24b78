"""Maintenance request/response schemas.

Pydantic models for the operator endpoints.

RESTful Endpoints (maintenance capability):
    POST   /api/v1/maintenance/transitions        - Run one transition sweep
    POST   /api/v1/maintenance/reconcile-counts   - Repair registered_count
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.application.dtos import ReconcileResult, SweepReport

# =============================================================================
# Transition sweep
# =============================================================================


class StepReportResponse(BaseModel):
    """One sweep step."""

    name: str = Field(..., description="Step name, in run order")
    processed: int = Field(..., description="Entities transitioned by this step")
    failed: int = Field(..., description="Entities whose transition raised")
    error: str | None = Field(None, description="Error text when the whole step aborted")


class SweepReportResponse(BaseModel):
    """Response schema for a manual sweep.

    POST /api/v1/maintenance/transitions
    Returns: 200 OK
    """

    steps: list[StepReportResponse]
    total_processed: int
    failed_steps: list[str]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "steps": [
                    {"name": "event_to_ongoing", "processed": 1, "failed": 0, "error": None},
                    {"name": "payment_timeout", "processed": 2, "failed": 0, "error": None},
                ],
                "total_processed": 3,
                "failed_steps": [],
            }
        }
    )

    @classmethod
    def from_report(cls, report: SweepReport) -> "SweepReportResponse":
        return cls(
            steps=[
                StepReportResponse(
                    name=step.name,
                    processed=step.processed,
                    failed=step.failed,
                    error=step.error,
                )
                for step in report.steps
            ],
            total_processed=report.total_processed,
            failed_steps=report.failed_steps,
        )


# =============================================================================
# Counter reconciliation
# =============================================================================


class ReconcileCountsRequest(BaseModel):
    """Request schema for counter repair. Omit ``event_id`` to repair all."""

    event_id: UUID | None = Field(None, description="Single event to repair")


class CountReconciliationResponse(BaseModel):
    event_id: UUID
    previous: int = Field(..., description="Stored registered_count before the repair")
    current: int = Field(..., description="Counted registrations after the repair")
    updated: bool


class ReconcileCountsResponse(BaseModel):
    """Response schema for counter repair.

    POST /api/v1/maintenance/reconcile-counts
    Returns: 200 OK
    """

    events: list[CountReconciliationResponse]
    updated: int
    unchanged: int

    @classmethod
    def from_result(cls, result: ReconcileResult) -> "ReconcileCountsResponse":
        return cls(
            events=[
                CountReconciliationResponse(
                    event_id=item.event_id,
                    previous=item.previous,
                    current=item.current,
                    updated=item.updated,
                )
                for item in result.events
            ],
            updated=result.updated,
            unchanged=result.unchanged,
        )
