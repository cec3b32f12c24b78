"""Unit tests for IntervalScheduler.

Sleep is injected, so no test waits on the wall clock.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.infrastructure.jobs.scheduler import IntervalScheduler


class StepSleep:
    """Sleep stand-in that records intervals and parks after ``limit`` calls."""

    def __init__(self, limit: int) -> None:
        self.calls: list[float] = []
        self.limit = limit
        self.reached = asyncio.Event()

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if len(self.calls) >= self.limit:
            self.reached.set()
            await asyncio.Event().wait()


def make_scheduler(job, mock_logger, sleep, **kwargs) -> IntervalScheduler:
    return IntervalScheduler(
        name="status_transitions",
        job=job,
        interval_seconds=300,
        logger=mock_logger,
        sleep=sleep,
        **kwargs,
    )


@pytest.mark.unit
class TestIntervalScheduler:
    """Scheduling loop."""

    @pytest.mark.parametrize("interval", [0, -5])
    def test_rejects_non_positive_interval(self, mock_logger, interval):
        """Test the interval must be positive."""
        with pytest.raises(ValueError):
            IntervalScheduler(
                name="x", job=AsyncMock(), interval_seconds=interval, logger=mock_logger
            )

    async def test_runs_immediately_then_every_interval(self, mock_logger):
        """Test the first run happens at start and later ones after each sleep."""
        job = AsyncMock()
        sleep = StepSleep(limit=3)
        scheduler = make_scheduler(job, mock_logger, sleep)

        scheduler.start()
        await asyncio.wait_for(sleep.reached.wait(), timeout=1)

        assert job.await_count == 3
        assert sleep.calls == [300, 300, 300]
        assert scheduler.runs == 3
        assert scheduler.running
        await scheduler.stop()
        assert not scheduler.running

    async def test_delayed_first_run(self, mock_logger):
        """Test run_immediately=False sleeps before the first run."""
        job = AsyncMock()
        sleep = StepSleep(limit=1)
        scheduler = make_scheduler(job, mock_logger, sleep, run_immediately=False)

        scheduler.start()
        await asyncio.wait_for(sleep.reached.wait(), timeout=1)

        job.assert_not_awaited()
        await scheduler.stop()

    async def test_failing_run_is_logged_and_loop_continues(self, mock_logger):
        """Test an exception from the job does not stop the loop."""
        job = AsyncMock(side_effect=[RuntimeError("db down"), None])
        sleep = StepSleep(limit=2)
        scheduler = make_scheduler(job, mock_logger, sleep)

        scheduler.start()
        await asyncio.wait_for(sleep.reached.wait(), timeout=1)
        await scheduler.stop()

        assert job.await_count == 2
        assert scheduler.runs == 2
        call = mock_logger.error.call_args
        assert call.args[0] == "scheduled_job_failed"
        assert call.kwargs["job"] == "status_transitions"
        assert isinstance(call.kwargs["error"], RuntimeError)

    async def test_start_twice_keeps_one_loop(self, mock_logger):
        """Test starting a running scheduler does nothing."""
        sleep = StepSleep(limit=1)
        scheduler = make_scheduler(AsyncMock(), mock_logger, sleep)

        scheduler.start()
        scheduler.start()
        await asyncio.wait_for(sleep.reached.wait(), timeout=1)
        await scheduler.stop()

        started = [c for c in mock_logger.info.call_args_list if c.args[0] == "scheduler_started"]
        assert len(started) == 1

    async def test_stop_without_start(self, mock_logger):
        """Test stopping an idle scheduler is a no-op."""
        scheduler = make_scheduler(AsyncMock(), mock_logger, StepSleep(limit=1))

        await scheduler.stop()

        assert not scheduler.running
        mock_logger.info.assert_not_called()

    async def test_run_once_counts_runs(self, mock_logger):
        """Test run_once runs the job a single time."""
        job = AsyncMock()
        scheduler = make_scheduler(job, mock_logger, StepSleep(limit=1))

        await scheduler.run_once()

        job.assert_awaited_once()
        assert scheduler.runs == 1
