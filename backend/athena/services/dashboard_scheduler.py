"""
Scheduler for periodic RSS dashboard refreshes.

Keeps the latest dashboard snapshot in memory and rebuilds it from the
fact-checker feeds at a fixed interval, so dashboard reads never wait on
the network once the first snapshot exists.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from athena.core.config import RSS_REFRESH_MINUTES
from athena.models.dashboard import DashboardSnapshot
from athena.services.rss_service import RSSService

logger = logging.getLogger(__name__)

JOB_ID = "rss_dashboard_refresh"


class DashboardScheduler:
    """
    Background refresher for the RSS dashboard snapshot.

    Scheduled runs are skipped while another refresh is in progress;
    explicit refreshes wait for it and then fetch again.
    """

    def __init__(self, rss_service: Optional[RSSService] = None, interval_minutes: Optional[int] = None):
        self.rss_service = rss_service or RSSService()
        self.interval_minutes = interval_minutes or RSS_REFRESH_MINUTES
        self.scheduler = AsyncIOScheduler()
        self._lock = asyncio.Lock()
        self._snapshot: Optional[DashboardSnapshot] = None
        self._last_run: Optional[datetime] = None
        self._last_error: Optional[str] = None

    @property
    def is_refreshing(self) -> bool:
        return self._lock.locked()

    async def refresh(self) -> DashboardSnapshot:
        """
        Fetch the feeds now and replace the shared snapshot.

        Raises whatever the fetch raised; the previous snapshot is kept.
        """
        async with self._lock:
            return await self._rebuild()

    async def _rebuild(self) -> DashboardSnapshot:
        # Caller holds self._lock
        loop = asyncio.get_running_loop()
        try:
            snapshot = await loop.run_in_executor(None, self.rss_service.build_snapshot)
        except Exception as e:
            self._last_error = str(e)
            raise

        self._snapshot = snapshot
        self._last_run = datetime.now(timezone.utc)
        self._last_error = None
        logger.info(f"[Scheduler] Dashboard snapshot refreshed with {len(snapshot.claims)} claims")
        return snapshot

    async def run_scheduled_refresh(self):
        """Called by the scheduler at each interval."""
        if self.is_refreshing:
            logger.warning("[Scheduler] Refresh already in progress, skipping this iteration")
            return

        try:
            await self.refresh()
        except Exception as e:
            logger.exception(f"[Scheduler] Error in scheduled refresh: {e}")

    async def get_snapshot(self) -> DashboardSnapshot:
        """
        Return the current snapshot, fetching one first if none exists yet.

        Requests that arrive during the first fetch wait for it and share
        its result.
        """
        if self._snapshot is None:
            async with self._lock:
                if self._snapshot is None:
                    return await self._rebuild()
        return self._snapshot

    def start(self):
        if self.scheduler.running:
            logger.warning("[Scheduler] Scheduler already running")
            return

        self.scheduler.add_job(
            self.run_scheduled_refresh,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=JOB_ID,
            name="RSS Dashboard Refresh",
            replace_existing=True,
            max_instances=1,
            next_run_time=datetime.now(timezone.utc),
        )

        self.scheduler.start()
        logger.info(f"[Scheduler] RSS scheduler started - refreshing every {self.interval_minutes} minutes")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("[Scheduler] RSS scheduler stopped")

    def get_status(self) -> dict:
        return {
            "running": self.scheduler.running,
            "interval_minutes": self.interval_minutes,
            "last_run": self._last_run.isoformat() if self._last_run else None,
            "last_error": self._last_error,
            "is_refreshing": self.is_refreshing,
            "has_snapshot": self._snapshot is not None,
            "next_run": self._get_next_run_time(),
        }

    def _get_next_run_time(self) -> Optional[str]:
        if not self.scheduler.running:
            return None

        job = self.scheduler.get_job(JOB_ID)
        if job and job.next_run_time:
            return job.next_run_time.isoformat()
        return None


_scheduler: Optional[DashboardScheduler] = None


def get_dashboard_scheduler() -> DashboardScheduler:
    """Get or create the global scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = DashboardScheduler()
    return _scheduler


def start_scheduler():
    get_dashboard_scheduler().start()


def stop_scheduler():
    global _scheduler
    if _scheduler is not None:
        _scheduler.stop()
        _scheduler = None
