"""
Task queue on APScheduler.

Every task becomes a one-shot DateTrigger job whose id is the task dedup key, so a
second task for the same (date, provider) is dropped while the first is pending or
running.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable

from apscheduler.jobstores.base import ConflictingIdError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from ratekeeper.worker.task import FetchRateTask

logger = logging.getLogger(__name__)

Consumer = Callable[[FetchRateTask], Awaitable[None]]


class TaskQueue(ABC):
    @abstractmethod
    def enqueue(self, task: FetchRateTask, delay: int = 0, *, continuation: bool = False) -> bool:
        """
        Schedule a task to run after `delay` seconds.

        continuation marks a task re-enqueued by the running task with the same key
        (retry, rate-limit reschedule); it is not treated as a duplicate.

        Returns:
            False when the task was dropped as a duplicate.
        """


class SchedulerTaskQueue(TaskQueue):
    def __init__(self, scheduler: AsyncIOScheduler, consumer: Consumer | None = None):
        self.scheduler = scheduler
        self.consumer = consumer
        self._running: set[str] = set()

    def bind(self, consumer: Consumer) -> None:
        self.consumer = consumer

    def enqueue(self, task: FetchRateTask, delay: int = 0, *, continuation: bool = False) -> bool:
        key = task.dedup_key
        if key in self._running and not continuation:
            logger.debug(f"Task {key} is running, dropped duplicate")
            return False
        if self.scheduler.get_job(key) is not None:
            logger.debug(f"Task {key} is already scheduled, dropped duplicate")
            return False

        run_date = datetime.now(timezone.utc) + timedelta(seconds=max(delay, 0))
        try:
            self.scheduler.add_job(
                self._run,
                DateTrigger(run_date=run_date),
                args=[task],
                id=key,
                name=f"Fetch {task.provider} {task.date.isoformat()}",
                misfire_grace_time=None,
            )
        except ConflictingIdError:
            logger.debug(f"Task {key} is already scheduled, dropped duplicate")
            return False
        return True

    async def _run(self, task: FetchRateTask) -> None:
        if self.consumer is None:
            raise RuntimeError("Task queue has no consumer bound")
        key = task.dedup_key
        self._running.add(key)
        try:
            await self.consumer(task)
        finally:
            self._running.discard(key)

    def is_idle(self) -> bool:
        """No task pending or running."""
        return not self._running and not self.scheduler.get_jobs()
