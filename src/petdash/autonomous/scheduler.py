"""Scheduler for background dashboard refreshes."""

import asyncio
from collections.abc import Callable, Sequence
from enum import Enum

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from petdash.aggregators.dashboard import DashboardAggregator
from petdash.config.settings import settings
from petdash.models import Pet, RefreshMode

logger = structlog.get_logger()

JOB_ID = "dashboard_refresh"


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class RefreshScheduler:
    """Refreshes the dashboard in the background on a fixed interval.

    Each tick is skipped (not retried early) when there are no pets or the
    session is inactive. Stopping cancels future ticks only; a refresh that
    is already running finishes.
    """

    def __init__(
        self,
        aggregator: DashboardAggregator,
        pets: Callable[[], Sequence[Pet]],
        is_active: Callable[[], bool] = lambda: True,
        interval_seconds: int | None = None,
    ) -> None:
        self.aggregator = aggregator
        self._pets = pets
        self._is_active = is_active
        self.interval_seconds = interval_seconds or settings.refresh.interval_seconds
        self.scheduler: AsyncIOScheduler | None = None
        self._cancelled: asyncio.Event | None = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def state(self) -> SchedulerState:
        if self.scheduler is not None and self.scheduler.running:
            return SchedulerState.RUNNING
        return SchedulerState.IDLE

    def start(self) -> None:
        """Start the refresh job, replacing any job already running.

        Must be called from within a running event loop.
        """
        self.stop()

        cancelled = asyncio.Event()
        self._cancelled = cancelled
        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.tick,
            IntervalTrigger(seconds=self.interval_seconds),
            args=[cancelled],
            id=JOB_ID,
            name="Dashboard Refresh",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info("Dashboard refresh scheduler started", interval_seconds=self.interval_seconds)

    def stop(self) -> None:
        """Stop the refresh job. Safe to call when not running."""
        if self._cancelled is not None:
            self._cancelled.set()
            self._cancelled = None

        if self.scheduler is not None:
            if self.scheduler.running:
                self.scheduler.shutdown(wait=False)
            self.scheduler = None
            logger.info("Dashboard refresh scheduler stopped")

    async def tick(self, cancelled: asyncio.Event | None = None) -> bool:
        """Run one background refresh if the gates allow it.

        Returns:
            True if the aggregator was invoked.
        """
        if cancelled is not None and cancelled.is_set():
            return False

        pets = list(self._pets())
        if not pets:
            logger.debug("Skipping refresh tick, no pets")
            return False
        if not self._is_active():
            logger.debug("Skipping refresh tick, session inactive")
            return False

        logger.info("Running background dashboard refresh", pets=len(pets))
        # Stopping the scheduler cancels this tick, not the refresh it started
        refresh = asyncio.ensure_future(self.aggregator.run(pets, RefreshMode.BACKGROUND))
        self._in_flight.add(refresh)
        refresh.add_done_callback(self._in_flight.discard)
        try:
            await asyncio.shield(refresh)
        except asyncio.CancelledError:
            logger.info("Scheduler stopped, letting the running refresh finish")
            raise
        except Exception as e:
            logger.error("Background dashboard refresh failed", error=str(e))

        if cancelled is not None and cancelled.is_set():
            logger.debug("Scheduler stopped during refresh")
        return True
