"""Scheduler service - periodic trigger for the check dispatcher.

The dispatcher decides per check whether it is due, so the tick only needs to
be shorter than the shortest check interval. max_instances=1 keeps a slow
batch from overlapping the next tick in this process.
"""
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .dispatcher import CheckDispatcher

logger = logging.getLogger(__name__)

# Scheduler tick interval in seconds
SCHEDULER_TICK_SECONDS = 60


class SchedulerService:
    """Runs dispatcher batches on a fixed tick."""

    def __init__(self, dispatcher: CheckDispatcher, tick_seconds: int = SCHEDULER_TICK_SECONDS):
        self.dispatcher = dispatcher
        self.tick_seconds = tick_seconds
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        """Start the scheduler. Must be called from a running event loop."""
        if self._running:
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self._run_checks,
            trigger=IntervalTrigger(seconds=self.tick_seconds),
            id="run_monitoring_checks",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=self.tick_seconds,
        )
        self.scheduler.start()
        self._running = True
        logger.info(f"Scheduler started (tick={self.tick_seconds}s)")

    def stop(self):
        """Stop the scheduler."""
        if self.scheduler and self._running:
            self.scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    async def _run_checks(self):
        """One tick. Errors are logged so the job keeps its schedule."""
        try:
            await self.dispatcher.run_batch()
        except Exception as e:
            logger.error(f"Error running monitoring batch: {e}")
