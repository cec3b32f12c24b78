"""Background jobs run inside the API process.

- IntervalScheduler: runs the status transition sweep on a fixed interval

Usage:
    from src.core.container import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
"""

from src.infrastructure.jobs.scheduler import IntervalScheduler

__all__ = ["IntervalScheduler"]
