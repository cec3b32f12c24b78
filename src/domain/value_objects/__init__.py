"""Domain value objects (immutable, no identity)."""

from src.domain.value_objects.actor import Actor

__all__ = ["Actor"]
