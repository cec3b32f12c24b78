"""Application DTOs (Data Transfer Objects).

Result dataclasses returned by command handlers and the transition sweep.
"""

from src.application.dtos.lifecycle_dtos import (
    AdvancementResult,
    CountReconciliation,
    ReconcileResult,
    RegistrationResult,
    SettlementResult,
    StepReport,
    SweepReport,
)

__all__ = [
    "AdvancementResult",
    "CountReconciliation",
    "ReconcileResult",
    "RegistrationResult",
    "SettlementResult",
    "StepReport",
    "SweepReport",
]
