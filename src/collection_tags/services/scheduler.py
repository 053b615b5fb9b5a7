"""
Triggers for the collection tag task.

The task runs on a fixed interval and, when enabled, right after a library
scan completes. At most one run is active at a time.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
from typing import Any, Callable

from collection_tags.models import ReconcileSummary
from collection_tags.services.common.cancellation import (
    CancellationToken,
    ProgressCallback,
)
from collection_tags.services.task import CollectionTagTask

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntervalTrigger:
    """Run the task every ``interval``."""

    interval: timedelta = timedelta(hours=6)

    @classmethod
    def from_hours(cls, hours: float) -> "IntervalTrigger":
        return cls(interval=timedelta(hours=hours))

    @property
    def seconds(self) -> float:
        return self.interval.total_seconds()


class TagScheduler:
    """Runs a CollectionTagTask on its triggers."""

    def __init__(
        self,
        task: CollectionTagTask,
        trigger: IntervalTrigger | None = None,
        progress: ProgressCallback | None = None,
        before_run: Callable[[], None] | None = None,
        after_run: Callable[[ReconcileSummary], None] | None = None,
    ):
        self.task = task
        self.trigger = trigger or IntervalTrigger.from_hours(
            task.settings.interval_hours
        )
        self.progress = progress
        self.before_run = before_run
        self.after_run = after_run

        self._lock = asyncio.Lock()
        self._stop_event = asyncio.Event()
        self._loop_task: asyncio.Task[None] | None = None
        self._current: CancellationToken | None = None

        self._stats: dict[str, Any] = {
            "runs": 0,
            "skipped": 0,
            "failed": 0,
            "last_run": None,
            "last_error": None,
        }

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def execute(self, reason: str = "manual") -> ReconcileSummary | None:
        """
        Run the task once unless a run is already active.

        ``before_run`` is called inside the lock ahead of the task and
        ``after_run`` with the finished summary.

        Returns the run summary, or None when the request was skipped.
        """
        if self._lock.locked():
            logger.info(f"{self.task.name} already running; skipping {reason} trigger")
            self._stats["skipped"] += 1
            return None

        async with self._lock:
            self._current = CancellationToken()
            logger.info(f"Task - Start: {self.task.name} ({reason})")
            try:
                if self.before_run is not None:
                    self.before_run()
                summary = await self.task.run(
                    progress=self.progress, cancel=self._current
                )
            finally:
                self._current = None
                self._stats["last_run"] = datetime.now().isoformat()
            self._stats["runs"] += 1
            if self.after_run is not None:
                self.after_run(summary)
            logger.info(f"Task - Complete: {self.task.name} ({reason})")
            return summary

    async def on_library_scan_completed(self) -> ReconcileSummary | None:
        """Post-scan trigger, gated by ``update_on_scan``."""
        logger.info("Task - Start: PostLibraryScanCollectionTagUpdateTask")
        summary = None
        if self.task.settings.update_on_scan:
            summary = await self.execute(reason="library scan")
        else:
            logger.debug("update_on_scan disabled; not running after library scan")
        logger.info("Task - Complete: PostLibraryScanCollectionTagUpdateTask")
        return summary

    # -------------------- Interval loop --------------------

    async def run_forever(self, run_immediately: bool = False) -> None:
        """Run on the interval trigger until ``stop`` is called."""
        logger.info(
            f"{self.task.name} scheduled every {self.trigger.interval} "
            f"(run_immediately={run_immediately})"
        )
        first = True
        try:
            while not self._stop_event.is_set():
                if not (first and run_immediately):
                    try:
                        await asyncio.wait_for(
                            self._stop_event.wait(), timeout=self.trigger.seconds
                        )
                        break
                    except asyncio.TimeoutError:
                        pass
                first = False

                try:
                    await self.execute(reason="interval")
                except asyncio.CancelledError:
                    if self._stop_event.is_set():
                        logger.info(f"{self.task.name} cancelled by shutdown")
                        break
                    raise
                except Exception as e:
                    logger.exception(f"{self.task.name} failed")
                    self._stats["failed"] += 1
                    self._stats["last_error"] = str(e)
        finally:
            logger.info(f"{self.task.name} scheduler exited")

    def start(self, run_immediately: bool = False) -> asyncio.Task[None]:
        """Start the interval loop in the background."""
        if self._loop_task is None or self._loop_task.done():
            self._stop_event.clear()
            self._loop_task = asyncio.create_task(
                self.run_forever(run_immediately=run_immediately)
            )
        return self._loop_task

    async def stop(self) -> None:
        """Stop the loop and cancel the active run at its next checkpoint."""
        self._stop_event.set()
        if self._current is not None:
            self._current.cancel()
        if self._loop_task is not None:
            await self._loop_task
            self._loop_task = None

    def get_status(self) -> dict[str, Any]:
        return {
            "running": self.is_running,
            "interval_seconds": self.trigger.seconds,
            "stats": dict(self._stats),
        }
