"""Periodic runner for the status transition sweep.

The scheduler runs one coroutine on a fixed interval inside the API
process. The first run happens right after ``start`` (when enabled), and a
tick never overlaps the previous one: the next sleep starts only after the
current run returned. A run that raises is logged and the loop goes on.

Usage:
    scheduler = IntervalScheduler(
        name="status_transitions",
        job=service.run_all_transitions,
        interval_seconds=300,
        logger=logger,
    )
    scheduler.start()
    ...
    await scheduler.stop()
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from src.domain.protocols import LoggerProtocol

SleepFn = Callable[[float], Awaitable[Any]]


class IntervalScheduler:
    """Run ``job`` every ``interval_seconds`` on the running event loop."""

    def __init__(
        self,
        *,
        name: str,
        job: Callable[[], Awaitable[Any]],
        interval_seconds: float,
        logger: LoggerProtocol,
        run_immediately: bool = True,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """Initialize scheduler.

        Args:
            name: Job name used in log lines.
            job: Coroutine function run on every tick.
            interval_seconds: Pause between the end of one run and the next.
            logger: Structured logger.
            run_immediately: Run once right after start instead of waiting
                a full interval first.
            sleep: Awaitable sleep, replaced in tests.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._name = name
        self._job = job
        self._interval = interval_seconds
        self._logger = logger
        self._run_immediately = run_immediately
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None
        self._runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def runs(self) -> int:
        """Completed runs, failed ones included."""
        return self._runs

    def start(self) -> None:
        """Start the loop. Starting a running scheduler does nothing."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=f"scheduler:{self._name}")
        self._logger.info(
            "scheduler_started",
            job=self._name,
            interval_seconds=self._interval,
            run_immediately=self._run_immediately,
        )

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self._logger.info("scheduler_stopped", job=self._name, runs=self._runs)

    async def run_once(self) -> None:
        """Run the job one time, logging instead of raising."""
        try:
            await self._job()
        except Exception as e:
            self._logger.error("scheduled_job_failed", error=e, job=self._name)
        finally:
            self._runs += 1

    async def _loop(self) -> None:
        if not self._run_immediately:
            await self._sleep(self._interval)
        while True:
            await self.run_once()
            await self._sleep(self._interval)
