"""Notification sink adapters."""

from src.infrastructure.notifications.in_memory_sink import (
    InMemoryNotificationSink,
    SentNotification,
)
from src.infrastructure.notifications.logging_sink import LoggingNotificationSink

__all__ = [
    "InMemoryNotificationSink",
    "LoggingNotificationSink",
    "SentNotification",
]
