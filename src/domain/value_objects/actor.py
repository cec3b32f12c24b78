"""Actor value object.

The authenticated caller of a command, as resolved by the outer layer.
Authentication itself happens elsewhere; the engine only sees who is acting
and with which role.
"""

from dataclasses import dataclass
from uuid import UUID

from src.domain.enums import UserRole


@dataclass(frozen=True, slots=True, kw_only=True)
class Actor:
    """Caller identity and role.

    Attributes:
        user_id: Acting user.
        role: Role used for capability checks.
    """

    user_id: UUID
    role: UserRole = UserRole.STUDENT
