"""Error response builder for RFC 7807 Problem Details.

Converts a DomainError returned by a handler into a JSON response. The
HTTP status follows the error's class first and its code second.

Exports:
    ErrorResponseBuilder: Utility class for building RFC 7807 responses
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from src.core.config import get_settings
from src.core.enums import ErrorCode
from src.core.errors import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from src.infrastructure.errors import ExternalServiceError
from src.presentation.routers.api.v1.errors.problem_details import (
    ErrorDetail,
    ProblemDetails,
)

_TITLES = {
    status.HTTP_400_BAD_REQUEST: "Validation Failed",
    status.HTTP_403_FORBIDDEN: "Forbidden",
    status.HTTP_404_NOT_FOUND: "Not Found",
    status.HTTP_409_CONFLICT: "Conflict",
    status.HTTP_502_BAD_GATEWAY: "Bad Gateway",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Internal Server Error",
}


class ErrorResponseBuilder:
    """Build RFC 7807 Problem Details error responses.

    Example:
        >>> match result:
        ...     case Failure(error=error):
        ...         return ErrorResponseBuilder.from_domain_error(error, request, trace_id)
    """

    @staticmethod
    def from_domain_error(
        error: DomainError,
        request: Request,
        trace_id: str | None,
    ) -> JSONResponse:
        """Convert a DomainError to an RFC 7807 JSON response."""
        status_code = ErrorResponseBuilder.status_code(error)
        problem = ProblemDetails(
            type=f"{get_settings().api_base_url}/errors/{error.code.value}",
            title=_TITLES.get(status_code, "Error"),
            status=status_code,
            detail=error.message,
            instance=str(request.url.path),
            code=error.code.value,
            trace_id=trace_id,
        )
        if isinstance(error, ValidationError) and error.field:
            problem.errors = [
                ErrorDetail(field=error.field, code=error.code.value, message=error.message)
            ]
        return JSONResponse(
            status_code=status_code,
            content=problem.model_dump(exclude_none=True),
        )

    @staticmethod
    def status_code(error: DomainError) -> int:
        """Map a domain error to an HTTP status code.

        Example:
            >>> ErrorResponseBuilder.status_code(event_not_found(event_id))
            404
        """
        if isinstance(error, ValidationError):
            return status.HTTP_400_BAD_REQUEST
        if isinstance(error, AuthorizationError):
            return status.HTTP_403_FORBIDDEN
        if isinstance(error, NotFoundError):
            return status.HTTP_404_NOT_FOUND
        if isinstance(error, ConflictError):
            return status.HTTP_409_CONFLICT
        if isinstance(error, ExternalServiceError):
            return status.HTTP_502_BAD_GATEWAY
        if error.code == ErrorCode.PERSISTENCE_FAILED:
            return status.HTTP_500_INTERNAL_SERVER_ERROR
        return status.HTTP_400_BAD_REQUEST
