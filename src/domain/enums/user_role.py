"""User roles for capability-based authorization.

Roles replace scattered role-string checks. Each role maps to a fixed
capability set (see src/domain/policies/authorization.py); code asks for a
capability, never for a role name.

Role Hierarchy:
    super_admin > admin > faculty / department_organizer > student

Usage:
    from src.domain.enums import UserRole

    actor = Actor(user_id=user_id, role=UserRole.ADMIN)
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles.

    String Enum:
        Values are lowercase to match the stored role names.
    """

    STUDENT = "student"
    """Participant: registers, pays, requests refunds for own registrations."""

    DEPARTMENT_ORGANIZER = "department_organizer"
    """Creates and manages own events."""

    FACULTY = "faculty"
    """Creates and manages own events."""

    ADMIN = "admin"
    """Manages any event, processes any refund, runs maintenance."""

    SUPER_ADMIN = "super_admin"
    """Everything an admin can do."""

    @classmethod
    def values(cls) -> list[str]:
        """Get all role values as strings.

        Returns:
            list[str]: List of role values.
        """
        return [role.value for role in cls]

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Check if a string is a valid role.

        Args:
            value: String to check.

        Returns:
            bool: True if value is a valid role.
        """
        return value in cls.values()
