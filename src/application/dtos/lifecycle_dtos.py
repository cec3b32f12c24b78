"""Lifecycle DTOs (Data Transfer Objects).

Result dataclasses for lifecycle command handlers and the transition sweep.
These carry outcomes from handlers back to the presentation layer and the
scheduler.

DTOs:
    - StepReport / SweepReport: outcome of run_all_transitions
    - SettlementResult: outcome of SettlePayment
    - RegistrationResult: registrations created by RegisterForEvent
    - CountReconciliation / ReconcileResult: outcome of count reconciliation
    - AdvancementResult: outcome of AdvanceParticipants
"""

from dataclasses import dataclass, field
from uuid import UUID

from src.domain.entities import Invoice, Registration


@dataclass
class StepReport:
    """Outcome of one sweep step.

    Attributes:
        name: Step name (event_to_ongoing, waitlist_promotion, ...).
        processed: Entities transitioned by this step.
        failed: Entities whose transition raised.
        error: Exception text when the whole step aborted.
    """

    name: str
    processed: int = 0
    failed: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """Step ran to completion without entity failures."""
        return self.error is None and self.failed == 0


@dataclass
class SweepReport:
    """Outcome of one ``run_all_transitions`` call, steps in run order."""

    steps: list[StepReport] = field(default_factory=list)

    def step(self, name: str) -> StepReport:
        """Report of the named step.

        Raises:
            KeyError: No step with that name ran.
        """
        for report in self.steps:
            if report.name == name:
                return report
        raise KeyError(name)

    @property
    def total_processed(self) -> int:
        """Entities transitioned across all steps."""
        return sum(report.processed for report in self.steps)

    @property
    def failed_steps(self) -> list[str]:
        """Names of steps that aborted or had entity failures."""
        return [report.name for report in self.steps if not report.succeeded]


@dataclass
class RegistrationResult:
    """Registrations created for one RegisterForEvent command.

    Attributes:
        registrations: Created registrations, the actor's first.
        waitlisted: Whether they were placed on the waitlist.
    """

    registrations: list[Registration]
    waitlisted: bool = False

    @property
    def primary(self) -> Registration:
        """The registering user's own registration."""
        return self.registrations[0]


@dataclass
class SettlementResult:
    """Outcome of a settlement callback.

    Attributes:
        payment_id: Settled payment.
        duplicate: The payment was already completed; nothing changed.
        succeeded: The payment is completed.
        updated_registration_ids: Registrations whose payment status moved.
        confirmed_registration_ids: Registrations flipped pending → confirmed.
        invoice: Invoice issued for this settlement.
    """

    payment_id: UUID
    duplicate: bool = False
    succeeded: bool = False
    updated_registration_ids: list[UUID] = field(default_factory=list)
    confirmed_registration_ids: list[UUID] = field(default_factory=list)
    invoice: Invoice | None = None


@dataclass
class CountReconciliation:
    """Counter repair for one event."""

    event_id: UUID
    previous: int
    current: int

    @property
    def updated(self) -> bool:
        """The stored counter had drifted and was rewritten."""
        return self.previous != self.current


@dataclass
class ReconcileResult:
    """Counter repair across events."""

    events: list[CountReconciliation] = field(default_factory=list)

    @property
    def updated(self) -> int:
        """Number of events whose counter was rewritten."""
        return sum(1 for item in self.events if item.updated)

    @property
    def unchanged(self) -> int:
        """Number of events whose counter was already correct."""
        return len(self.events) - self.updated


@dataclass
class AdvancementResult:
    """Outcome of advancing participants from one round to the next."""

    from_round: int
    to_round: int
    advanced_ids: list[UUID] = field(default_factory=list)
    eliminated_ids: list[UUID] = field(default_factory=list)
