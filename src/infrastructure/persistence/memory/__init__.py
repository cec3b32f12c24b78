"""In-memory lifecycle store (single process)."""

from src.infrastructure.persistence.memory.store import InMemoryLifecycleStore

__all__ = ["InMemoryLifecycleStore"]
