"""NotificationSinkProtocol - Port for notification delivery.

Fire-and-forget delivery to in-app, email, push and SMS channels.
Infrastructure provides concrete implementations (LoggingNotificationSink,
InMemoryNotificationSink). Application code calls it through the
NotificationDispatcher, which catches and logs delivery failures so a
failing channel never aborts a state transition.
"""

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from src.domain.enums import NotificationChannel, NotificationPriority


class NotificationSinkProtocol(Protocol):
    """Notification sink protocol (port).

    This is a Protocol (not ABC) for structural typing.
    Implementations don't need to inherit from this.
    """

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
        """Deliver one notification to one recipient.

        Args:
            recipient_id: User to notify.
            title: Short title.
            message: Body text.
            related_event_id: Event the notification is about.
            channels: Channels to deliver on.
            priority: Delivery priority.

        Raises:
            Exception: Implementations may raise on delivery failure; callers
                treat delivery as best-effort.
        """
        ...
