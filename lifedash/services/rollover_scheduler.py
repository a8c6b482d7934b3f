"""
Rollover scheduler: polls the day lifecycle sweep on a fixed interval.

The sweep is re-entrant, so a tick that finds nothing to do is harmless.
Started from the FastAPI lifespan as a tracked task and cancelled on shutdown.
"""

import asyncio
import logging
from typing import Optional

from ..domain.errors import DomainError
from ..utils.task_tracker import create_tracked_task
from .day_lifecycle import DayLifecycleService

logger = logging.getLogger(__name__)


class RolloverScheduler:
    """Runs ``run_day_rollover_sweep`` every ``interval_seconds``."""

    def __init__(self, service: DayLifecycleService, interval_seconds: float = 60) -> None:
        self._service = service
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._task = create_tracked_task(self._run(), name="rollover_scheduler")
        logger.info("Rollover scheduler started (every %ss)", self._interval)
        return self._task

    async def stop(self) -> None:
        if not self.running:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Rollover scheduler stopped")

    async def tick(self) -> None:
        """One sweep. Failures are logged; the loop keeps going."""
        try:
            report = await self._service.run_day_rollover_sweep()
        except DomainError as e:
            logger.error("Rollover sweep rejected: %s", e)
            return
        except Exception as e:
            logger.error("Rollover sweep failed: %s", e, exc_info=True)
            return
        if report.changed:
            logger.info(
                "Rollover to %s: %d day(s) not counted",
                report.today,
                len(report.materialized),
            )

    async def _run(self) -> None:
        while True:
            await self.tick()
            await asyncio.sleep(self._interval)
