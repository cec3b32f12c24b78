"""Notification delivery enums.

Usage:
    from src.domain.enums import NotificationChannel, NotificationPriority

    await sink.notify(
        recipient_id=user_id,
        title="Spot Available",
        message="...",
        related_event_id=event.id,
        channels=(NotificationChannel.IN_APP, NotificationChannel.EMAIL),
        priority=NotificationPriority.HIGH,
    )
"""

from enum import Enum


class NotificationChannel(str, Enum):
    """Delivery channel for a notification."""

    IN_APP = "in_app"
    EMAIL = "email"
    PUSH = "push"
    SMS = "sms"


class NotificationPriority(str, Enum):
    """Delivery priority for a notification."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
