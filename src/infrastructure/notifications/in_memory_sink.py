"""Notification sink that keeps every notification in memory.

Used by tests and by the in-memory deployment to inspect what was sent.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from src.domain.enums import NotificationChannel, NotificationPriority


@dataclass(frozen=True, slots=True, kw_only=True)
class SentNotification:
    """One delivered notification."""

    recipient_id: UUID
    title: str
    message: str
    related_event_id: UUID | None
    channels: tuple[NotificationChannel, ...]
    priority: NotificationPriority


class InMemoryNotificationSink:
    """Collects notifications instead of delivering them.

    Attributes:
        sent: Notifications in delivery order.
        fail_for: Recipients whose delivery raises (failure injection).
    """

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []
        self.fail_for: set[UUID] = set()

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
        """Record one notification, or raise for recipients in ``fail_for``."""
        if recipient_id in self.fail_for:
            raise ConnectionError(f"Delivery to {recipient_id} failed")
        self.sent.append(
            SentNotification(
                recipient_id=recipient_id,
                title=title,
                message=message,
                related_event_id=related_event_id,
                channels=tuple(channels),
                priority=priority,
            )
        )

    def titles_for(self, recipient_id: UUID) -> list[str]:
        """Titles sent to one recipient, in order."""
        return [n.title for n in self.sent if n.recipient_id == recipient_id]

    def with_title(self, title: str) -> list[SentNotification]:
        """Notifications whose title starts with ``title``."""
        return [n for n in self.sent if n.title.startswith(title)]

    def clear(self) -> None:
        """Forget everything sent so far."""
        self.sent.clear()
