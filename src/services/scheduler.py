"""
Daily image scheduler
Fires the daily image job once a day at a fixed local time inside the API process.
"""

import asyncio
from datetime import datetime, time, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)

JobFn = Callable[[], Awaitable[Any]]


def seconds_until(run_at: time, now: Optional[datetime] = None) -> float:
    now = now or datetime.now()
    next_run = datetime.combine(now.date(), run_at)
    if next_run <= now:
        next_run += timedelta(days=1)
    return (next_run - now).total_seconds()


class DailyScheduler:
    def __init__(self, job: JobFn, run_at: time, name: str = "daily_image"):
        self.job = job
        self.run_at = run_at
        self.name = name
        self._task: Optional[asyncio.Task] = None
        self.last_run: Optional[Dict[str, Any]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=f"scheduler:{self.name}")
        logger.info("scheduler_started", job=self.name, run_at=self.run_at.isoformat())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("scheduler_stopped", job=self.name)

    async def run_once(self) -> bool:
        started_at = datetime.now()
        try:
            await self.job()
        except Exception as e:
            logger.error("scheduled_job_failed", job=self.name, error=str(e), exc_info=True)
            self.last_run = {"started_at": started_at.isoformat(), "success": False, "error": str(e)}
            return False

        self.last_run = {"started_at": started_at.isoformat(), "success": True, "error": None}
        logger.info("scheduled_job_completed", job=self.name)
        return True

    async def _loop(self) -> None:
        while True:
            delay = seconds_until(self.run_at)
            logger.info("scheduler_sleeping", job=self.name, seconds=round(delay))
            await asyncio.sleep(delay)
            await self.run_once()
