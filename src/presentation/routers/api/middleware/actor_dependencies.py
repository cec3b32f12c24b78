"""Caller identity dependency.

Authentication happens upstream (API gateway). The gateway forwards the
authenticated user as two headers:

    X-User-Id:   UUID of the caller
    X-User-Role: student, department_organizer, faculty, admin, super_admin

Usage:
    @router.post("/maintenance/transitions")
    async def run(actor: Actor = Depends(get_actor)):
        ...
"""

from typing import Annotated
from uuid import UUID

from fastapi import Header, HTTPException, status

from src.domain.enums import UserRole
from src.domain.value_objects import Actor


async def get_actor(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Actor:
    """Build the calling Actor from gateway headers.

    Raises:
        HTTPException 401: Missing or malformed user id.
        HTTPException 403: Unknown role.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    try:
        user_id = UUID(x_user_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id must be a UUID",
        ) from e
    role = (x_user_role or UserRole.STUDENT.value).strip().lower()
    if not UserRole.is_valid(role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Unknown role: {x_user_role}",
        )
    return Actor(user_id=user_id, role=UserRole(role))
