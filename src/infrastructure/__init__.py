"""Infrastructure layer - Adapters and external integrations.

This layer contains implementations of domain protocols (ports):
- persistence/: SQLAlchemy repositories and the in-memory store
- payments/: payment gateway adapters
- notifications/: notification sinks
- jobs/: in-process interval scheduler for the transition sweep
- logging/: structlog adapter
- clock.py: system and frozen clocks

The infrastructure layer depends on the domain layer (implements protocols)
but the domain layer does NOT depend on infrastructure.
"""
