"""Infrastructure dependency factories.

Application-scoped singletons for infrastructure adapters:
- Logging (structlog console)
- Clock
- Database (SQLAlchemy async engine)
- Lifecycle store (SQL repositories or the in-memory store)
- Notification sink
- Payment gateway

Every factory is ``lru_cache``-d; ``reset_container`` clears them (tests,
settings reload).
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.config import get_settings
from src.core.enums import Environment

if TYPE_CHECKING:
    from src.domain.protocols import (
        ClockProtocol,
        LoggerProtocol,
        NotificationSinkProtocol,
        PaymentGatewayProtocol,
        Repositories,
    )
    from src.infrastructure.persistence.database import Database
    from src.infrastructure.persistence.memory import InMemoryLifecycleStore


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    - development: ConsoleAdapter (human-readable)
    - testing/ci/production: ConsoleAdapter (JSON lines)
    """
    from src.infrastructure.logging import ConsoleAdapter

    settings = get_settings()
    return ConsoleAdapter(
        service=settings.app_name,
        use_json=settings.environment != Environment.DEVELOPMENT,
        level=settings.log_level,
    )


@lru_cache()
def get_clock() -> "ClockProtocol":
    """System clock (UTC)."""
    from src.infrastructure.clock import SystemClock

    return SystemClock()


@lru_cache()
def get_database() -> "Database":
    """Get database manager singleton (app-scoped).

    Only built when ``storage_backend`` is ``sql``.
    """
    from src.infrastructure.persistence.database import Database

    settings = get_settings()
    return Database(
        database_url=settings.database_url,
        echo=settings.db_echo,
    )


@lru_cache()
def get_memory_store() -> "InMemoryLifecycleStore":
    """Process-local store used when ``storage_backend`` is ``memory``."""
    from src.infrastructure.persistence.memory import InMemoryLifecycleStore

    return InMemoryLifecycleStore()


@lru_cache()
def get_repositories() -> "Repositories":
    """Repository bundle of the configured store."""
    if get_settings().storage_backend == "memory":
        return get_memory_store().repositories()

    from src.infrastructure.persistence.repositories import build_sql_repositories

    return build_sql_repositories(get_database())


@lru_cache()
def get_notification_sink() -> "NotificationSinkProtocol":
    """Notification sink. Deliveries are written to the log."""
    from src.infrastructure.notifications import LoggingNotificationSink

    return LoggingNotificationSink(get_logger())


@lru_cache()
def get_payment_gateway() -> "PaymentGatewayProtocol":
    """Payment gateway adapter."""
    from src.infrastructure.payments import StubPaymentGateway

    return StubPaymentGateway()


def reset_container() -> None:
    """Drop every cached singleton, settings included."""
    for factory in (
        get_logger,
        get_clock,
        get_database,
        get_memory_store,
        get_repositories,
        get_notification_sink,
        get_payment_gateway,
    ):
        factory.cache_clear()
    get_settings.cache_clear()

    from src.core.container import services

    services.get_notification_dispatcher.cache_clear()
    services.get_waitlist_service.cache_clear()
    services.get_status_transition_service.cache_clear()
