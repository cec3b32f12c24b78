"""Commands - Write operations that change state.

Commands represent caller intent to perform an action. They are immutable
dataclasses with imperative names (RegisterForEvent, SettlePayment).

Each command has a corresponding handler that contains the orchestration
logic to execute the command.
"""

from src.application.commands.event_commands import (
    AddRound,
    AdvanceParticipants,
    CancelEvent,
    CreateEvent,
    DeleteEvent,
    PublishEvent,
    RoundSpec,
    UpdateEvent,
    UpdateRound,
)
from src.application.commands.maintenance_commands import (
    ReconcileRegisteredCounts,
    RunTransitions,
)
from src.application.commands.payment_commands import (
    InitiatePayment,
    ProcessRefund,
    RequestRefund,
    SettlePayment,
)
from src.application.commands.registration_commands import (
    ApproveRegistration,
    CancelRegistration,
    RegisterForEvent,
    RejectRegistration,
)
from src.application.commands.team_commands import (
    CreateTeam,
    JoinTeam,
    LeaveTeam,
    LockTeam,
)

__all__ = [
    # Event commands
    "AddRound",
    "AdvanceParticipants",
    "CancelEvent",
    "CreateEvent",
    "DeleteEvent",
    "PublishEvent",
    "RoundSpec",
    "UpdateEvent",
    "UpdateRound",
    # Registration commands
    "ApproveRegistration",
    "CancelRegistration",
    "RegisterForEvent",
    "RejectRegistration",
    # Team commands
    "CreateTeam",
    "JoinTeam",
    "LeaveTeam",
    "LockTeam",
    # Payment commands
    "InitiatePayment",
    "ProcessRefund",
    "RequestRefund",
    "SettlePayment",
    # Maintenance commands
    "ReconcileRegisteredCounts",
    "RunTransitions",
]
