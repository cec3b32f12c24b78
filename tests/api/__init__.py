"""API tests package.

Requests go through the real app wired to the in-memory store, so these
cover routing, caller identity, problem details and response shapes.
"""
