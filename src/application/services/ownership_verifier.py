"""Ownership verification service.

Centralizes the load-then-authorize step shared by event and registration
handlers. Returns the loaded entities on success so handlers avoid a second
fetch.

Ownership Chain:
    Registration → Event → Organizer

Usage:
    verifier = OwnershipVerifier(event_repo, registration_repo)

    # Organizer (or MANAGE_ANY_EVENT) only
    result = await verifier.verify_event_manager(event_id, actor)

    # Registration owner, or a manager of its event
    result = await verifier.verify_registration_access(registration_id, actor)
"""

from uuid import UUID

from src.application.errors import event_not_found, forbidden, registration_not_found
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import Event, Registration
from src.domain.errors import EventError, RegistrationError
from src.domain.policies import can_manage_event
from src.domain.protocols import EventRepository, RegistrationRepository
from src.domain.value_objects import Actor


class OwnershipVerifier:
    """Service for verifying who may act on events and registrations.

    Dependencies (injected via constructor):
        - EventRepository: For event retrieval
        - RegistrationRepository: For registration retrieval
    """

    def __init__(
        self,
        event_repo: EventRepository,
        registration_repo: RegistrationRepository,
    ) -> None:
        """Initialize ownership verifier with dependencies.

        Args:
            event_repo: Repository for event lookup.
            registration_repo: Repository for registration lookup.
        """
        self._event_repo = event_repo
        self._registration_repo = registration_repo

    async def verify_event_manager(
        self,
        event_id: UUID,
        actor: Actor,
    ) -> Result[Event, DomainError]:
        """Verify the actor organizes the event or manages any event.

        Returns:
            Success(Event): Event exists and the actor may manage it.
            Failure(NotFoundError | AuthorizationError): Otherwise.
        """
        event = await self._event_repo.find_by_id(event_id)
        if event is None:
            return Failure(error=event_not_found(event_id))
        if not can_manage_event(actor, event):
            return Failure(error=forbidden(EventError.NOT_AUTHORIZED))
        return Success(value=event)

    async def verify_registration_access(
        self,
        registration_id: UUID,
        actor: Actor,
        *,
        managers_only: bool = False,
    ) -> Result[tuple[Registration, Event], DomainError]:
        """Verify the actor may act on a registration.

        Args:
            registration_id: Registration to load.
            actor: Acting caller.
            managers_only: Require event management rights; ownership of the
                registration is not enough.

        Returns:
            Success((Registration, Event)): Both loaded, access granted.
            Failure(NotFoundError | AuthorizationError): Otherwise.
        """
        registration = await self._registration_repo.find_by_id(registration_id)
        if registration is None:
            return Failure(error=registration_not_found(registration_id))

        event = await self._event_repo.find_by_id(registration.event_id)
        if event is None:
            return Failure(error=event_not_found(registration.event_id))

        is_owner = registration.user_id == actor.user_id and not managers_only
        if not is_owner and not can_manage_event(actor, event):
            message = EventError.NOT_AUTHORIZED if managers_only else RegistrationError.NOT_OWNER
            return Failure(error=forbidden(message))
        return Success(value=(registration, event))
