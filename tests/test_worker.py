"""
Fetch task, handler and throttling tests.
"""

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from conftest import RecordingQueue, Stack
from pydantic import ValidationError

from ratekeeper.errors import InvalidOperand, LimitExceeded, ParseFailure, ProviderError
from ratekeeper.worker import Backpressure, FetchRateHandler, FetchRateTask, SchedulerTaskQueue, throttle_delay

FRIDAY = date(2026, 2, 6)
SATURDAY = date(2026, 2, 7)
SUNDAY = date(2026, 2, 8)
MONDAY = date(2026, 2, 9)
TUESDAY = date(2026, 2, 10)


class TestFetchRateTask:
    def test_dedup_key(self):
        task = FetchRateTask(date=TUESDAY, provider="cbr")
        assert task.dedup_key == "fetch-rate-2026-02-10-cbr"

    def test_immutable(self):
        task = FetchRateTask(date=TUESDAY, provider="cbr")
        with pytest.raises(ValidationError):
            task.retry_count = 1

    def test_next_retry(self):
        task = FetchRateTask(date=TUESDAY, provider="cbr", load_previous=3)
        retry = task.next_retry()
        assert retry.retry_count == 1
        assert retry.load_previous == 3
        assert task.retry_count == 0

    def test_backfill(self):
        task = FetchRateTask(date=TUESDAY, provider="cbr", load_previous=3, no_rate=2, retry_count=1)
        assert task.backfill(MONDAY, empty=True) == FetchRateTask(
            date=MONDAY, provider="cbr", load_previous=2, no_rate=3
        )
        assert task.backfill(MONDAY, empty=False).no_rate == 0


class TestFetchRateHandler:
    def setup_method(self):
        self.stack = Stack()
        self.provider = self.stack.provider
        self.queue = RecordingQueue()
        self.handler = FetchRateHandler(
            self.stack.settings,
            self.stack.importer,
            self.stack.registry,
            self.queue,
            self.stack.rate_limits,
        )

    def handle(self, task):
        asyncio.run(self.handler.handle(task))

    def test_single_fetch_does_not_chain(self):
        self.provider.serve(TUESDAY, {"USD": "75.0"})
        self.handle(FetchRateTask(date=TUESDAY, provider="cbr"))
        assert self.queue.tasks == []
        assert (TUESDAY, "USD", "RUB", 1) in self.stack.repository.records

    def test_backfill_walks_back_one_day(self):
        self.provider.serve(TUESDAY, {"USD": "75.0"})
        self.handle(FetchRateTask(date=TUESDAY, provider="cbr", load_previous=3))
        task, delay, continuation = self.queue.last
        assert task == FetchRateTask(date=MONDAY, provider="cbr", load_previous=2)
        assert delay == self.provider.request_delay
        assert not continuation

    def test_backfill_continues_below_corrected_day(self):
        self.provider.serve(SUNDAY, {"USD": "80.0"}, actual=FRIDAY)
        self.handle(FetchRateTask(date=SUNDAY, provider="cbr", load_previous=5))
        assert self.queue.last[0].date == date(2026, 2, 5)

    def test_empty_day_counts(self):
        self.handle(FetchRateTask(date=SUNDAY, provider="cbr", load_previous=5, no_rate=2))
        task = self.queue.last[0]
        assert task.date == SATURDAY
        assert task.no_rate == 3
        assert task.load_previous == 4

    def test_chain_stops_after_max_empty_days(self):
        self.handle(FetchRateTask(date=SUNDAY, provider="cbr", load_previous=50, no_rate=9))
        assert self.queue.tasks == []

    def test_existing_day_is_not_delayed(self):
        self.stack.repository.add(TUESDAY, "USD", "RUB", "75.0", 1)
        self.handle(FetchRateTask(date=TUESDAY, provider="cbr", load_previous=2))
        assert self.provider.calls == []
        assert self.queue.last[1] == 0

    def test_throttled_near_quota(self):
        for _ in range(90):
            self.stack.rate_limits.increment(1, 3600)
        self.provider.serve(TUESDAY, {"USD": "75.0"})
        self.handle(FetchRateTask(date=TUESDAY, provider="cbr", load_previous=2))
        assert self.queue.last[1] == 2 + 360

    def test_limit_exceeded_reschedules_without_retry(self):
        self.provider.error = LimitExceeded(600, "cbr")
        task = FetchRateTask(date=TUESDAY, provider="cbr", retry_count=2)
        self.handle(task)
        assert self.queue.last == (task, 600, True)

    def test_lag_jumps_to_available_date(self):
        task = FetchRateTask(date=TUESDAY, provider="fred", load_previous=30)
        self.handle(task)
        moved = self.queue.last[0]
        assert moved.date == date(2026, 1, 30)
        assert moved.load_previous == 30

    def test_lag_without_backfill_is_dropped(self):
        self.handle(FetchRateTask(date=TUESDAY, provider="fred"))
        assert self.queue.tasks == []

    def test_disabled_provider_is_swallowed(self):
        self.handle(FetchRateTask(date=TUESDAY, provider="abstract_api", load_previous=3))
        assert self.queue.tasks == []

    def test_unknown_provider_is_dropped(self):
        self.handle(FetchRateTask(date=TUESDAY, provider="nope"))
        assert self.queue.tasks == []

    def test_invalid_operand_is_not_retried(self):
        self.provider.error = InvalidOperand("Expected numeric string, got: 'n/a'")
        self.handle(FetchRateTask(date=TUESDAY, provider="cbr"))
        assert self.queue.tasks == []

    def test_failure_is_retried_on_schedule(self):
        self.provider.error = ProviderError("boom", "cbr", "HTTP_500")
        for attempt, minutes in enumerate([10, 60, 1440, 10080]):
            self.handle(FetchRateTask(date=TUESDAY, provider="cbr", retry_count=attempt))
            task, delay, continuation = self.queue.last
            assert task.retry_count == attempt + 1
            assert delay == minutes * 60
            assert continuation

    def test_unparsable_payload_is_logged_and_retried(self, caplog):
        self.provider.error = ParseFailure("bad payload", "cbr", "<html>MAINTENANCE-PAGE</html>")
        with caplog.at_level(logging.ERROR, logger="ratekeeper.worker.handler"):
            self.handle(FetchRateTask(date=TUESDAY, provider="cbr"))
        assert "<html>MAINTENANCE-PAGE</html>" in caplog.text
        task, delay, continuation = self.queue.last
        assert task.retry_count == 1
        assert continuation

    def test_max_retries_reraises(self):
        self.provider.error = ProviderError("boom", "cbr", "HTTP_500")
        with pytest.raises(ProviderError):
            self.handle(FetchRateTask(date=TUESDAY, provider="cbr", retry_count=4))
        assert self.queue.tasks == []


class TestThrottleDelay:
    def setup_method(self):
        self.stack = Stack()
        self.provider = self.stack.provider

    def test_far_from_quota(self):
        assert throttle_delay(self.provider, self.stack.rate_limits, 10, 2) == 2

    def test_near_quota(self):
        for _ in range(95):
            self.stack.rate_limits.increment(1, 3600)
        assert throttle_delay(self.provider, self.stack.rate_limits, 10) == 360

    def test_unlimited_provider(self):
        provider = self.stack.registry.get("fred")
        assert throttle_delay(provider, self.stack.rate_limits, 10, 1) == 1


class TestBackpressure:
    def setup_method(self):
        self.stack = Stack()
        self.backpressure = Backpressure(self.stack.settings, self.stack.registry, self.stack.rate_limits)

    def test_far_from_quota(self):
        assert self.backpressure.delay("cbr", 5) == 5

    def test_near_quota(self):
        for _ in range(95):
            self.stack.rate_limits.increment(1, 3600)
        assert self.backpressure.delay("cbr") == 360

    def test_unusable_provider_passes_delay_through(self):
        assert self.backpressure.delay("nope", 3) == 3
        assert self.backpressure.delay("abstract_api", 3) == 3


class TestSchedulerTaskQueue:
    def setup_method(self):
        # Never started: added jobs stay pending
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.queue = SchedulerTaskQueue(self.scheduler)
        self.task = FetchRateTask(date=TUESDAY, provider="cbr")

    def test_enqueue_schedules_after_delay(self):
        assert self.queue.is_idle()
        assert self.queue.enqueue(self.task, delay=600)
        job = self.scheduler.get_job(self.task.dedup_key)
        assert job.args == (self.task,)
        expected = datetime.now(timezone.utc) + timedelta(seconds=600)
        assert abs(job.trigger.run_date - expected) < timedelta(seconds=5)
        assert not self.queue.is_idle()

    def test_pending_duplicate_is_dropped(self):
        assert self.queue.enqueue(self.task)
        assert not self.queue.enqueue(FetchRateTask(date=TUESDAY, provider="cbr", load_previous=5))
        assert len(self.scheduler.get_jobs()) == 1

    def test_other_date_is_not_a_duplicate(self):
        assert self.queue.enqueue(self.task)
        assert self.queue.enqueue(FetchRateTask(date=MONDAY, provider="cbr"))
        assert len(self.scheduler.get_jobs()) == 2

    def test_running_task_blocks_duplicates_but_not_continuations(self):
        outcomes = []

        async def consumer(task):
            outcomes.append(self.queue.enqueue(task))
            outcomes.append(self.queue.enqueue(task.next_retry(), delay=600, continuation=True))

        self.queue.bind(consumer)
        asyncio.run(self.queue._run(self.task))

        assert outcomes == [False, True]
        retry = self.scheduler.get_job(self.task.dedup_key).args[0]
        assert retry.retry_count == 1
        assert self.queue.enqueue(self.task) is False

    def test_run_without_consumer(self):
        with pytest.raises(RuntimeError):
            asyncio.run(self.queue._run(self.task))
