"""Best-effort notification fan-out.

Wraps the notification sink so a failing channel never aborts the state
transition that triggered it. Each recipient is delivered independently
and failures are logged at warning level; the caller never sees an
exception.

Usage:
    dispatcher = NotificationDispatcher(sink=sink, logger=logger)
    await dispatcher.notify(
        [event.organizer_id],
        title=f"Event Started: {event.title}",
        message="...",
        event_id=event.id,
        channels=IN_APP_EMAIL,
        priority=NotificationPriority.HIGH,
    )
"""

import asyncio
from collections.abc import Iterable, Sequence
from uuid import UUID

from src.domain.enums import NotificationChannel, NotificationPriority
from src.domain.protocols import LoggerProtocol, NotificationSinkProtocol

IN_APP_EMAIL: tuple[NotificationChannel, ...] = (
    NotificationChannel.IN_APP,
    NotificationChannel.EMAIL,
)
IN_APP_PUSH: tuple[NotificationChannel, ...] = (
    NotificationChannel.IN_APP,
    NotificationChannel.PUSH,
)
IN_APP_EMAIL_PUSH: tuple[NotificationChannel, ...] = (
    NotificationChannel.IN_APP,
    NotificationChannel.EMAIL,
    NotificationChannel.PUSH,
)
IN_APP_ONLY: tuple[NotificationChannel, ...] = (NotificationChannel.IN_APP,)


class NotificationDispatcher:
    """Deliver one notification to many recipients, fail-open."""

    def __init__(self, sink: NotificationSinkProtocol, logger: LoggerProtocol) -> None:
        """Initialize dispatcher.

        Args:
            sink: Notification sink (port).
            logger: Logger for delivery failures.
        """
        self._sink = sink
        self._logger = logger

    async def notify(
        self,
        recipient_ids: Iterable[UUID],
        *,
        title: str,
        message: str,
        event_id: UUID | None,
        channels: Sequence[NotificationChannel] = IN_APP_ONLY,
        priority: NotificationPriority = NotificationPriority.NORMAL,
    ) -> int:
        """Notify every recipient once.

        Duplicated recipient ids are delivered once.

        Returns:
            Number of recipients delivered without error.
        """
        recipients = list(dict.fromkeys(recipient_ids))
        if not recipients:
            return 0

        results = await asyncio.gather(
            *(
                self._sink.notify(
                    recipient_id=recipient_id,
                    title=title,
                    message=message,
                    related_event_id=event_id,
                    channels=tuple(channels),
                    priority=priority,
                )
                for recipient_id in recipients
            ),
            return_exceptions=True,
        )

        delivered = 0
        for recipient_id, result in zip(recipients, results, strict=True):
            if isinstance(result, Exception):
                self._logger.warning(
                    "notification_delivery_failed",
                    recipient_id=str(recipient_id),
                    event_id=str(event_id) if event_id else None,
                    title=title,
                    error_type=type(result).__name__,
                    error_message=str(result),
                )
            else:
                delivered += 1
        return delivered
