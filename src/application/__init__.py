"""Application layer - Use cases and orchestration.

Structure:
- commands/: Command dataclasses and their handlers
- services/: Waitlist, notification dispatch, ownership checks and the
  periodic status transition sweep
- dtos/: Results returned by handlers

Handlers load entities through repository protocols, apply domain rules,
and return Result values. They hold no business rules of their own.
"""
