"""Logging adapters (structlog)."""

from src.infrastructure.logging.console_adapter import ConsoleAdapter, configure_structlog

__all__ = ["ConsoleAdapter", "configure_structlog"]
