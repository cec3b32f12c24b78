"""Unit tests for NotificationDispatcher."""

import pytest
from uuid_extensions import uuid7

from src.application.services.notification_dispatcher import IN_APP_EMAIL
from src.domain.enums import NotificationChannel, NotificationPriority


@pytest.mark.unit
class TestNotificationDispatcher:
    """Fail-open fan-out."""

    async def test_delivers_once_per_recipient(self, notifications, sink):
        """Test duplicate recipients are notified once."""
        user = uuid7()
        event_id = uuid7()

        delivered = await notifications.notify(
            [user, user],
            title="Hello",
            message="World",
            event_id=event_id,
            channels=IN_APP_EMAIL,
            priority=NotificationPriority.HIGH,
        )

        assert delivered == 1
        assert len(sink.sent) == 1
        sent = sink.sent[0]
        assert sent.related_event_id == event_id
        assert sent.channels == (NotificationChannel.IN_APP, NotificationChannel.EMAIL)
        assert sent.priority == NotificationPriority.HIGH

    async def test_failure_is_logged_not_raised(self, notifications, sink, mock_logger):
        """Test one failing recipient does not stop the others."""
        bad, good = uuid7(), uuid7()
        sink.fail_for.add(bad)

        delivered = await notifications.notify(
            [bad, good], title="Heads up", message="...", event_id=None
        )

        assert delivered == 1
        assert sink.titles_for(good) == ["Heads up"]
        mock_logger.warning.assert_called_once()
        call = mock_logger.warning.call_args
        assert call.args[0] == "notification_delivery_failed"
        assert call.kwargs["recipient_id"] == str(bad)
        assert call.kwargs["error_type"] == "ConnectionError"

    async def test_no_recipients(self, notifications, sink):
        """Test an empty recipient list sends nothing."""
        assert await notifications.notify([], title="x", message="y", event_id=None) == 0
        assert sink.sent == []
