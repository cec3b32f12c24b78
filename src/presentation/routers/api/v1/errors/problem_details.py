"""RFC 7807 Problem Details for HTTP APIs.

RFC 7807: https://tools.ietf.org/html/rfc7807

Exports:
    ErrorDetail: Individual field-specific error
    ProblemDetails: RFC 7807 compliant error response schema
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Field-specific error (validation failures)."""

    field: str = Field(..., description="Field name")
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details.

    Examples:
        >>> problem = ProblemDetails(
        ...     type="http://localhost:8000/errors/permission_denied",
        ...     title="Forbidden",
        ...     status=403,
        ...     detail="Maintenance capability required",
        ...     instance="/api/v1/maintenance/transitions",
        ... )
    """

    type: str = Field(
        ...,
        description="URI reference identifying the problem type",
        examples=["http://localhost:8000/errors/event_not_found"],
    )
    title: str = Field(..., description="Short, human-readable summary", examples=["Not Found"])
    status: int = Field(..., description="HTTP status code", examples=[404])
    detail: str = Field(..., description="Human-readable explanation", examples=["Event not found"])
    instance: str = Field(
        ...,
        description="URI reference identifying this occurrence",
        examples=["/api/v1/maintenance/reconcile-counts"],
    )
    code: str | None = Field(None, description="Machine-readable domain error code")
    errors: list[ErrorDetail] | None = Field(None, description="List of field-specific errors")
    trace_id: str | None = Field(None, description="Request trace ID for debugging")
