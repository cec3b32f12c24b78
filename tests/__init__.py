"""Test suite for the event lifecycle engine.

- unit/: Domain rules, handlers and services against the in-memory store
- integration/: SQL repositories and end-to-end flows on SQLite
- api/: HTTP endpoints through TestClient
"""
