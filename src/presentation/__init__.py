"""Presentation layer - HTTP endpoints.

Structure:
- routers/system.py: Root and health endpoints
- routers/api/v1/: Versioned maintenance endpoints and RFC 7807 errors

Routers dispatch to command handlers and translate Results to responses.
"""
