"""FIFO waitlist promotion.

Promotes waitlisted registrations of one event into freed capacity, oldest
first (registration date, then id). Used by the transition sweep and,
synchronously, after a cancellation or rejection releases a spot.

Promotion target:
    unpaid event -> CONFIRMED (counted immediately)
    paid event   -> PENDING with payment PENDING and a fresh payment window
                    (counted from settlement onward)

Every promotion is a compare-and-set from WAITLISTED guarded by the event
capacity, so a concurrent registration or a second promoter can never push
the event over capacity. The first refused promotion ends the pass; later
entries are never promoted ahead of an earlier one.
"""

from datetime import datetime
from uuid import UUID

from src.application.services.notification_dispatcher import (
    IN_APP_EMAIL_PUSH,
    NotificationDispatcher,
)
from src.domain.entities import Event, Registration
from src.domain.enums import (
    EventStatus,
    NotificationPriority,
    RegistrationPaymentStatus,
    RegistrationStatus,
)
from src.domain.protocols import (
    EventRepository,
    LoggerProtocol,
    RegistrationChange,
    RegistrationRepository,
)

_PROMOTABLE_EVENT_STATES = frozenset({EventStatus.PUBLISHED, EventStatus.ONGOING})


class WaitlistService:
    """Move waitlisted registrations into free spots in FIFO order."""

    def __init__(
        self,
        event_repo: EventRepository,
        registration_repo: RegistrationRepository,
        notifications: NotificationDispatcher,
        logger: LoggerProtocol,
        payment_window_hours: int = 24,
    ) -> None:
        """Initialize waitlist service.

        Args:
            event_repo: Event repository.
            registration_repo: Registration repository.
            notifications: Best-effort notification dispatcher.
            logger: Structured logger.
            payment_window_hours: Payment window granted on paid promotion.
        """
        self._event_repo = event_repo
        self._registration_repo = registration_repo
        self._notifications = notifications
        self._logger = logger
        self._payment_window_hours = payment_window_hours

    async def promote(self, event_id: UUID, now: datetime) -> list[Registration]:
        """Promote as many waitlisted registrations as capacity allows.

        Args:
            event_id: Event whose waitlist to process.
            now: Promotion time (start of the new payment window).

        Returns:
            Promoted registrations, in promotion order.
        """
        event = await self._event_repo.find_by_id(event_id)
        if event is None or event.is_unlimited():
            return []
        if event.status not in _PROMOTABLE_EVENT_STATES:
            return []

        awaiting = await self._registration_repo.count_awaiting_payment(event_id)
        spots = event.spots_available(awaiting) or 0
        if spots <= 0:
            return []

        candidates = await self._registration_repo.find_waitlisted(event_id, spots)
        promoted: list[Registration] = []
        for candidate in candidates:
            updated = await self._registration_repo.transition(
                candidate.id,
                expected_statuses={RegistrationStatus.WAITLISTED},
                change=self._promotion_change(event, now),
                capacity=event.max_participants,
            )
            if updated is None:
                # Capacity was taken or the entry left the waitlist meanwhile.
                self._logger.info(
                    "waitlist_promotion_stopped",
                    event_id=str(event_id),
                    registration_id=str(candidate.id),
                )
                break
            promoted.append(updated)
            self._logger.info(
                "waitlist_promoted",
                event_id=str(event_id),
                registration_id=str(updated.id),
                status=updated.status.value,
            )
            await self._notify_promoted(event, updated)
        return promoted

    @staticmethod
    def _promotion_change(event: Event, now: datetime) -> RegistrationChange:
        if event.is_paid:
            return RegistrationChange(
                status=RegistrationStatus.PENDING,
                payment_status=RegistrationPaymentStatus.PENDING,
                payment_window_started_at=now,
            )
        return RegistrationChange(status=RegistrationStatus.CONFIRMED)

    async def _notify_promoted(self, event: Event, registration: Registration) -> None:
        if event.is_paid:
            message = (
                f'A spot has opened up for "{event.title}"! Please complete your '
                f"payment within {self._payment_window_hours} hours to confirm "
                "your registration."
            )
        else:
            message = (
                f'A spot has opened up for "{event.title}"! '
                "Your registration is now confirmed."
            )
        await self._notifications.notify(
            [registration.user_id],
            title=f"Spot Available: {event.title}",
            message=message,
            event_id=event.id,
            channels=IN_APP_EMAIL_PUSH,
            priority=NotificationPriority.HIGH,
        )

    async def promote_after_release(self, event_id: UUID, now: datetime) -> list[Registration]:
        """Promote after a command released a spot.

        The command has already succeeded at this point; a failure here is
        logged and left to the next sweep.
        """
        try:
            return await self.promote(event_id, now)
        except Exception as e:
            self._logger.warning(
                "waitlist_promotion_deferred",
                event_id=str(event_id),
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return []
