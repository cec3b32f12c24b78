"""Time-driven status transitions (the sweep).

``run_all_transitions`` runs six steps in a fixed order:

    1. event_to_ongoing     published events whose start has been reached
    2. event_to_completed   ongoing events whose end has been reached
    3. round_to_active      upcoming rounds whose start has been reached
    4. round_to_completed   active rounds whose end has been reached
    5. payment_timeout      paid-event registrations unpaid after the window,
                            unless a completed payment covers them
    6. waitlist_promotion   fill freed capacity from the waitlists, FIFO

Every step and every entity inside a step is fault-isolated: an exception is
logged with the step name and entity ids and the sweep moves on. All writes
are conditional on the persisted state (event, round and registration
compare-and-set), so running the sweep twice in a row, or
concurrently with request handlers, never repeats a transition, a counter
delta or a notification.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from uuid import UUID

from src.application.dtos import StepReport, SweepReport
from src.application.services.notification_dispatcher import (
    IN_APP_EMAIL,
    IN_APP_ONLY,
    IN_APP_PUSH,
    NotificationDispatcher,
)
from src.application.services.waitlist_service import WaitlistService
from src.core.result import Failure
from src.domain.entities import Event, Registration, Round
from src.domain.enums import (
    EventStatus,
    NotificationPriority,
    PaymentStatus,
    RegistrationStatus,
    RoundStatus,
)
from src.domain.errors import RegistrationError
from src.domain.policies import PAYMENT_DUE_STATES
from src.domain.protocols import (
    ClockProtocol,
    EventRepository,
    LoggerProtocol,
    PaymentRepository,
    RegistrationChange,
    RegistrationRepository,
)

EVENT_TO_ONGOING = "event_to_ongoing"
EVENT_TO_COMPLETED = "event_to_completed"
ROUND_TO_ACTIVE = "round_to_active"
ROUND_TO_COMPLETED = "round_to_completed"
PAYMENT_TIMEOUT = "payment_timeout"
WAITLIST_PROMOTION = "waitlist_promotion"

STEP_ORDER: tuple[str, ...] = (
    EVENT_TO_ONGOING,
    EVENT_TO_COMPLETED,
    ROUND_TO_ACTIVE,
    ROUND_TO_COMPLETED,
    PAYMENT_TIMEOUT,
    WAITLIST_PROMOTION,
)

StepFn = Callable[[datetime, StepReport], Awaitable[None]]


class StatusTransitionService:
    """Apply every time-based transition that is due."""

    def __init__(
        self,
        *,
        event_repo: EventRepository,
        registration_repo: RegistrationRepository,
        payment_repo: PaymentRepository,
        waitlist: WaitlistService,
        notifications: NotificationDispatcher,
        clock: ClockProtocol,
        logger: LoggerProtocol,
        payment_window: timedelta = timedelta(hours=24),
    ) -> None:
        """Initialize transition service.

        Args:
            event_repo: Event repository.
            registration_repo: Registration repository.
            payment_repo: Payment repository (settled payments are never
                timed out).
            waitlist: Waitlist promotion service.
            notifications: Best-effort notification dispatcher.
            clock: Time source.
            logger: Structured logger.
            payment_window: How long a paid-event registration may stay
                unpaid before the sweep cancels it.
        """
        self._event_repo = event_repo
        self._registration_repo = registration_repo
        self._payment_repo = payment_repo
        self._waitlist = waitlist
        self._notifications = notifications
        self._clock = clock
        self._logger = logger
        self._payment_window = payment_window

    def _steps(self) -> dict[str, StepFn]:
        return {
            EVENT_TO_ONGOING: self.transition_events_to_ongoing,
            EVENT_TO_COMPLETED: self.transition_events_to_completed,
            ROUND_TO_ACTIVE: self.transition_rounds_to_active,
            ROUND_TO_COMPLETED: self.transition_rounds_to_completed,
            PAYMENT_TIMEOUT: self.cancel_timed_out_payments,
            WAITLIST_PROMOTION: self.promote_waitlisted_registrations,
        }

    async def run_all_transitions(self) -> SweepReport:
        """Run every step once, in order.

        Returns:
            SweepReport with one StepReport per step. Never raises for a
            failing step.
        """
        now = self._clock.now()
        report = SweepReport()
        steps = self._steps()
        self._logger.info("transition_sweep_started", now=now.isoformat())

        for name in STEP_ORDER:
            step_report = StepReport(name=name)
            try:
                await steps[name](now, step_report)
            except Exception as e:
                step_report.error = str(e)
                self._logger.error("transition_step_failed", error=e, step=name)
            report.steps.append(step_report)

        self._logger.info(
            "transition_sweep_finished",
            processed=report.total_processed,
            failed_steps=report.failed_steps,
        )
        return report

    async def _isolated(
        self,
        report: StepReport,
        action: Callable[[], Awaitable[int]],
        **entity_ids: UUID,
    ) -> None:
        """Run one entity's transition, recording instead of raising."""
        try:
            report.processed += await action()
        except Exception as e:
            report.failed += 1
            self._logger.error(
                "transition_entity_failed",
                error=e,
                step=report.name,
                **{key: str(value) for key, value in entity_ids.items()},
            )

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    async def transition_events_to_ongoing(self, now: datetime, report: StepReport) -> None:
        """PUBLISHED -> ONGOING for events inside their window."""
        for event in await self._event_repo.find_due_to_start(now):
            await self._isolated(
                report, lambda event=event: self._start_event(event, now), event_id=event.id
            )

    async def _start_event(self, event: Event, now: datetime) -> int:
        if not await self._flip_event(event, EventStatus.ONGOING, now):
            return 0

        await self._notifications.notify(
            [event.organizer_id],
            title=f"Event Started: {event.title}",
            message=(
                f'Your event "{event.title}" has started. You can now mark '
                "attendance and manage the event."
            ),
            event_id=event.id,
            channels=IN_APP_EMAIL,
            priority=NotificationPriority.HIGH,
        )
        confirmed = await self._registration_repo.find_by_event(
            event.id, {RegistrationStatus.CONFIRMED}
        )
        await self._notifications.notify(
            [registration.user_id for registration in confirmed],
            title=f"Event Starting Now: {event.title}",
            message=f'The event "{event.title}" is now ongoing. Don\'t forget to check in!',
            event_id=event.id,
            channels=IN_APP_PUSH,
            priority=NotificationPriority.NORMAL,
        )
        return 1

    async def transition_events_to_completed(self, now: datetime, report: StepReport) -> None:
        """ONGOING -> COMPLETED for events past their end."""
        for event in await self._event_repo.find_due_to_complete(now):
            await self._isolated(
                report, lambda event=event: self._complete_event(event, now), event_id=event.id
            )

    async def _complete_event(self, event: Event, now: datetime) -> int:
        if not await self._flip_event(event, EventStatus.COMPLETED, now):
            return 0

        await self._notifications.notify(
            [event.organizer_id],
            title=f"Event Completed: {event.title}",
            message=(
                f'Your event "{event.title}" has ended. You can now generate '
                "certificates and view final analytics."
            ),
            event_id=event.id,
            channels=IN_APP_EMAIL,
            priority=NotificationPriority.HIGH,
        )
        return 1

    async def _flip_event(self, event: Event, target: EventStatus, now: datetime) -> bool:
        """Guard with the transition table, then compare-and-set in the store."""
        expected = event.status
        if isinstance(event.transition_to(target, now), Failure):
            return False
        changed = await self._event_repo.transition_status(
            event.id, expected=expected, target=target, now=now
        )
        if changed:
            self._logger.info(
                "event_status_transitioned",
                event_id=str(event.id),
                from_status=expected.value,
                to_status=target.value,
            )
        return changed

    # -------------------------------------------------------------------------
    # Rounds
    # -------------------------------------------------------------------------

    async def transition_rounds_to_active(self, now: datetime, report: StepReport) -> None:
        """UPCOMING -> ACTIVE for rounds whose start has been reached."""
        for event in await self._event_repo.find_with_due_rounds(now):
            await self._isolated(
                report, lambda event=event: self._activate_rounds(event, now), event_id=event.id
            )

    async def _activate_rounds(self, event: Event, now: datetime) -> int:
        if event.status == EventStatus.CANCELLED:
            return 0
        changed = await self._flip_rounds(
            event, event.activate_due_rounds(now), RoundStatus.UPCOMING, now
        )
        if not changed:
            return 0

        self._logger.info(
            "rounds_activated",
            event_id=str(event.id),
            round_ids=[str(r.id) for r in changed],
        )
        await self._notifications.notify(
            [event.organizer_id],
            title=f"Round Started: {event.title}",
            message=(
                f'A round in your event "{event.title}" is now active. '
                "You can start recording results."
            ),
            event_id=event.id,
            channels=IN_APP_ONLY,
            priority=NotificationPriority.NORMAL,
        )
        return len(changed)

    async def transition_rounds_to_completed(self, now: datetime, report: StepReport) -> None:
        """ACTIVE -> COMPLETED for rounds whose end has been reached."""
        for event in await self._event_repo.find_with_due_rounds(now):
            await self._isolated(
                report, lambda event=event: self._complete_rounds(event, now), event_id=event.id
            )

    async def _complete_rounds(self, event: Event, now: datetime) -> int:
        if event.status == EventStatus.CANCELLED:
            return 0
        changed = await self._flip_rounds(
            event, event.complete_due_rounds(now), RoundStatus.ACTIVE, now
        )
        if not changed:
            return 0

        self._logger.info(
            "rounds_completed",
            event_id=str(event.id),
            round_ids=[str(r.id) for r in changed],
        )
        await self._notifications.notify(
            [event.organizer_id],
            title=f"Round Completed: {event.title}",
            message=(
                f'A round in your event "{event.title}" has ended. '
                "You can now progress teams to the next round."
            ),
            event_id=event.id,
            channels=IN_APP_ONLY,
            priority=NotificationPriority.NORMAL,
        )
        return len(changed)

    async def _flip_rounds(
        self,
        event: Event,
        candidates: list[Round],
        expected: RoundStatus,
        now: datetime,
    ) -> list[Round]:
        """Compare-and-set each candidate; keep only rounds this call moved.

        ``candidates`` already carry their target status (set on the loaded
        copy); the store applies it only where the round is still ``expected``.
        """
        return [
            round_
            for round_ in candidates
            if await self._event_repo.transition_round(
                event.id, round_.id, expected=expected, target=round_.status, now=now
            )
        ]

    # -------------------------------------------------------------------------
    # Registrations
    # -------------------------------------------------------------------------

    async def cancel_timed_out_payments(self, now: datetime, report: StepReport) -> None:
        """Cancel paid-event registrations still unpaid after the window."""
        overdue = await self._registration_repo.find_overdue_payments(now - self._payment_window)
        events: dict[UUID, Event | None] = {}
        for registration in overdue:
            if registration.event_id not in events:
                events[registration.event_id] = await self._event_repo.find_by_id(
                    registration.event_id
                )
            event = events[registration.event_id]
            if event is None or not event.is_paid:
                continue
            await self._isolated(
                report,
                lambda registration=registration, event=event: self._cancel_unpaid(
                    registration, event, now
                ),
                registration_id=registration.id,
                event_id=event.id,
            )

    async def _cancel_unpaid(self, registration: Registration, event: Event, now: datetime) -> int:
        settled = await self._settled_payment_id(registration)
        if settled is not None:
            # The payment went through but the registration write did not;
            # a replayed settlement confirms it.
            self._logger.warning(
                "payment_timeout_skipped_settled",
                registration_id=str(registration.id),
                payment_id=str(settled),
            )
            return 0

        cancelled = await self._registration_repo.transition(
            registration.id,
            expected_statuses={RegistrationStatus.PENDING},
            expected_payment_statuses=PAYMENT_DUE_STATES,
            change=RegistrationChange(
                status=RegistrationStatus.CANCELLED,
                cancelled_at=now,
                cancellation_reason=RegistrationError.PAYMENT_TIMEOUT,
            ),
        )
        if cancelled is None:
            return 0

        self._logger.info(
            "registration_payment_timed_out",
            registration_id=str(registration.id),
            event_id=str(event.id),
        )
        await self._notifications.notify(
            [registration.user_id],
            title=f"Registration Cancelled: {event.title}",
            message=(
                f'Your registration for "{event.title}" has been cancelled as payment '
                "was not completed in time. Please register again if you wish to "
                "participate."
            ),
            event_id=event.id,
            channels=IN_APP_EMAIL,
            priority=NotificationPriority.NORMAL,
        )
        return 1

    async def _settled_payment_id(self, registration: Registration) -> UUID | None:
        """Completed payment covering the registration, its own or its team's."""
        payers = [registration.id]
        if registration.team_id is not None:
            members = await self._registration_repo.find_by_team(
                registration.team_id, registration.event_id
            )
            payers = [member.id for member in members if member.is_active()]
        completed = await self._payment_repo.find_by_registrations(
            payers, {PaymentStatus.COMPLETED}
        )
        return completed[0].id if completed else None

    async def promote_waitlisted_registrations(self, now: datetime, report: StepReport) -> None:
        """Fill freed capacity from each event's waitlist."""
        for event_id in await self._registration_repo.find_event_ids_with_waitlist():
            await self._isolated(
                report,
                lambda event_id=event_id: self._promote(event_id, now),
                event_id=event_id,
            )

    async def _promote(self, event_id: UUID, now: datetime) -> int:
        return len(await self._waitlist.promote(event_id, now))
