"""Domain layer - Pure business logic.

Events, rounds, registrations, teams, payments, refunds and invoices, along
with the state machines that govern them. Nothing here imports a framework
or touches I/O.

Structure:
- entities/: Mutable entities with identity
- enums/: Lifecycle statuses, roles and capabilities
- policies/: Capacity, refund tiers and role capabilities
- protocols/: Repository, gateway, clock and logger ports
- validators/: Schedule and edit rules returning Result values
- state_machine.py: Allowed transitions per lifecycle
"""
