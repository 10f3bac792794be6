"""
Fetch task handler: runs the importer for a task and decides what comes next
(retry, reschedule, next backfill step or nothing).
"""

import logging
from datetime import timedelta

from ratekeeper.cache import RateLimitCache
from ratekeeper.config import Settings
from ratekeeper.errors import (
    DisabledProvider,
    InvalidOperand,
    LimitExceeded,
    NoDataAvailable,
    ParseFailure,
    ProviderNotFound,
)
from ratekeeper.importer import ProviderImporter
from ratekeeper.models import FetchStatus
from ratekeeper.providers import BaseRateProvider
from ratekeeper.registry import ProviderRegistry
from ratekeeper.worker.queue import TaskQueue
from ratekeeper.worker.task import FetchRateTask

logger = logging.getLogger(__name__)


def throttle_delay(
    provider: BaseRateProvider,
    rate_limits: RateLimitCache,
    margin: int,
    delay: int = 0
) -> int:
    """Add a tenth of the limit period when the provider is close to its quota."""
    limit = provider.request_limit
    period = provider.request_limit_period
    if limit > 0 and period > 0:
        if rate_limits.get_request_count(provider.provider_id, period) >= limit - margin:
            delay += period // 10
    return delay


class Backpressure:
    """Start delay for new tasks of a provider, by key."""

    def __init__(self, settings: Settings, registry: ProviderRegistry, rate_limits: RateLimitCache):
        self.registry = registry
        self.rate_limits = rate_limits
        self.margin = settings.throttle_margin

    def delay(self, key: str, delay: int = 0) -> int:
        try:
            provider = self.registry.get(key)
        except (ProviderNotFound, DisabledProvider):
            # The handler reports these when the task runs
            return delay
        return throttle_delay(provider, self.rate_limits, self.margin, delay)


class FetchRateHandler:
    def __init__(
        self,
        settings: Settings,
        importer: ProviderImporter,
        registry: ProviderRegistry,
        queue: TaskQueue,
        rate_limits: RateLimitCache
    ):
        self.settings = settings
        self.importer = importer
        self.registry = registry
        self.queue = queue
        self.rate_limits = rate_limits
        self.backpressure = Backpressure(settings, registry, rate_limits)

    async def handle(self, task: FetchRateTask) -> None:
        """
        Process one fetch task.

        Raises:
            Exception: the last error of a task that ran out of retries
        """
        try:
            status, found = await self.importer.fetch_and_save_rates(task.provider, task.date)
        except DisabledProvider as e:
            logger.info(f"Provider {task.provider} skipped: {e}")
            return
        except ProviderNotFound as e:
            logger.error(str(e))
            return
        except LimitExceeded as e:
            logger.warning(f"Provider {task.provider} throttled, {task.dedup_key} moved by {e.retry_after}s")
            self.queue.enqueue(task, delay=e.retry_after, continuation=True)
            return
        except NoDataAvailable as e:
            if task.load_previous > 0:
                self.queue.enqueue(task.moved_to(e.available_date))
            else:
                logger.info(f"{task.dedup_key}: {e}")
            return
        except InvalidOperand as e:
            logger.error(f"Invalid rate value in {task.dedup_key}: {e}")
            return
        except Exception as e:
            if isinstance(e, ParseFailure):
                logger.error(f"Unparsable payload from {task.provider} for {task.date}: {e.details['content']!r}")
            delays = self.settings.retry_delays_minutes
            if task.retry_count >= len(delays):
                logger.error(f"Max retries reached for {task.dedup_key}: {e}")
                raise
            delay = delays[task.retry_count] * 60
            logger.warning(
                f"Fetch {task.dedup_key} failed ({type(e).__name__}: {e}), "
                f"retry {task.retry_count + 1}/{len(delays)} in {delay}s"
            )
            self.queue.enqueue(task.next_retry(), delay=delay, continuation=True)
            return

        logger.debug(f"{task.dedup_key}: {status.value} ({found})")
        self._continue_backfill(task, status, found)

    def _continue_backfill(self, task: FetchRateTask, status: FetchStatus, found) -> None:
        if task.load_previous <= 0:
            return

        empty = status == FetchStatus.EMPTY
        if empty and task.no_rate + 1 >= self.settings.max_empty_days:
            logger.info(
                f"Backfill of {task.provider} stopped at {task.date}: "
                f"{task.no_rate + 1} empty days in a row"
            )
            return

        # The provider may answer with an earlier day; continue below whichever is older
        next_date = min(task.date, found) - timedelta(days=1)
        provider = self.registry.get(task.provider)
        delay = 0 if status == FetchStatus.ALREADY_EXISTS else provider.request_delay
        delay = self.backpressure.delay(task.provider, delay)
        self.queue.enqueue(task.backfill(next_date, empty), delay=delay)
