"""Result types for railway-oriented programming.

Every command handler and guarded domain operation in the lifecycle engine
reports failure as data instead of raising. Callers branch on the variant
with structural pattern matching.

Usage:
    result = attempt_transition(event, EventStatus.PUBLISHED)
    match result:
        case Success(value=event):
            await event_repo.save(event)
        case Failure(error=error):
            logger.warning("event_transition_rejected", reason=str(error))
"""

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Successful outcome.

    Attributes:
        value: The produced value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Failed outcome.

    Attributes:
        error: The error describing why the operation failed.
    """

    error: E


Result: TypeAlias = Success[T] | Failure[E]
