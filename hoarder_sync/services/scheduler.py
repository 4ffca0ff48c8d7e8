"""Background scheduler for periodic incremental syncs."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

if TYPE_CHECKING:
    from hoarder_sync.adapters.hoarder.sync.service import BookmarkSyncService

logger = logging.getLogger(__name__)

INCREMENTAL_SYNC_JOB_ID = "incremental_sync"


class SchedulerService:
    """Runs ``incremental_sync`` on a fixed interval in daemon mode."""

    def __init__(self, service: BookmarkSyncService, *, interval_sec: float) -> None:
        """Initialize scheduler service.

        Args:
            service: Sync service whose incremental sync is scheduled
            interval_sec: Seconds between runs
        """
        self.service = service
        self.interval_sec = interval_sec
        self._scheduler: AsyncIOScheduler | None = None
        self._started = False

    async def start(self) -> None:
        """Start the scheduler with the incremental sync job."""
        if self._started:
            logger.warning("scheduler_already_started")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._run_incremental_sync,
            trigger=IntervalTrigger(seconds=self.interval_sec),
            id=INCREMENTAL_SYNC_JOB_ID,
            name="Hoarder Incremental Sync",
            replace_existing=True,
            max_instances=1,  # Prevent overlapping runs
            coalesce=True,
        )
        logger.info(
            "scheduler_sync_job_added",
            extra={"job_id": INCREMENTAL_SYNC_JOB_ID, "interval_sec": self.interval_sec},
        )

        self._scheduler.start()
        self._started = True
        logger.info("scheduler_started")

    async def stop(self) -> None:
        """Stop the scheduler; a running job is not waited for."""
        if self._scheduler and self._started:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            self._started = False
            logger.info("scheduler_stopped")

    async def _run_incremental_sync(self) -> None:
        """Execute a scheduled incremental sync. Failures wait for the next tick."""
        correlation_id = f"scheduled_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S')}"
        logger.info("scheduled_sync_starting", extra={"cid": correlation_id})
        try:
            result = await self.service.incremental_sync()
        except Exception as e:
            logger.exception(
                "scheduled_sync_failed",
                extra={"cid": correlation_id, "error": str(e)},
            )
            return

        logger.info(
            "scheduled_sync_complete",
            extra={
                "cid": correlation_id,
                "mode": result.mode,
                "synced": result.items_synced,
                "skipped": result.items_skipped,
                "duration_seconds": result.duration_seconds,
            },
        )

    @property
    def is_running(self) -> bool:
        return self._started and self._scheduler is not None
