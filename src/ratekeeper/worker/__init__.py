"""
Background fetch tasks: value objects, the APScheduler-backed queue and the handler.
"""

from ratekeeper.worker.handler import Backpressure, FetchRateHandler, throttle_delay
from ratekeeper.worker.queue import SchedulerTaskQueue, TaskQueue
from ratekeeper.worker.task import FetchRateTask

__all__ = [
    "Backpressure",
    "FetchRateHandler",
    "FetchRateTask",
    "SchedulerTaskQueue",
    "TaskQueue",
    "throttle_delay",
]
