"""Notification sink that writes each notification to the structured log.

Default sink when no delivery service is configured. Email, push and in-app
delivery belong to an outside service that consumes the same calls.
"""

from collections.abc import Sequence
from uuid import UUID

from src.domain.enums import NotificationChannel, NotificationPriority
from src.domain.protocols import LoggerProtocol


class LoggingNotificationSink:
    """Log-only notification delivery."""

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger

    async def notify(
        self,
        *,
        recipient_id: UUID,
        title: str,
        message: str,
        related_event_id: UUID | None,
        channels: Sequence[NotificationChannel],
        priority: NotificationPriority,
    ) -> None:
        """Record one notification."""
        self._logger.info(
            "notification_sent",
            recipient_id=str(recipient_id),
            title=title,
            message=message,
            related_event_id=str(related_event_id) if related_event_id else None,
            channels=[channel.value for channel in channels],
            priority=priority.value,
        )
