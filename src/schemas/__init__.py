"""Request/response schemas for API endpoints.

Schemas are kept separate from domain entities (HTTP-layer concerns only).

Usage:
    from src.schemas import SweepReportResponse, ReconcileCountsRequest
"""

from src.schemas.maintenance_schemas import (
    CountReconciliationResponse,
    ReconcileCountsRequest,
    ReconcileCountsResponse,
    StepReportResponse,
    SweepReportResponse,
)

__all__ = [
    "CountReconciliationResponse",
    "ReconcileCountsRequest",
    "ReconcileCountsResponse",
    "StepReportResponse",
    "SweepReportResponse",
]
