"""
Service facade tests, including the pending -> fetched -> ok round trip.
"""

import asyncio
from datetime import date

import pytest
from conftest import TODAY, RecordingQueue, Stack
from pydantic import ValidationError

from ratekeeper.models import ProviderKey
from ratekeeper.service import MIN_DATE, RateRequest, RateService
from ratekeeper.worker import Backpressure, FetchRateHandler, FetchRateTask

FRIDAY = date(2026, 2, 6)
MONDAY = date(2026, 2, 9)


class TestRateService:
    def setup_method(self):
        self.stack = Stack()
        self.queue = RecordingQueue()
        backpressure = Backpressure(self.stack.settings, self.stack.registry, self.stack.rate_limits)
        self.service = RateService(self.stack.manager, self.queue, backpressure, today=lambda: TODAY)
        self.handler = FetchRateHandler(
            self.stack.settings,
            self.stack.importer,
            self.stack.registry,
            self.queue,
            self.stack.rate_limits,
        )

    def get_rate(self, **kwargs):
        params = {"currency": "USD", "on": TODAY, "base_currency": "RUB", "provider": "cbr"}
        params.update(kwargs)
        return asyncio.run(self.service.get_rate(**params))

    def drain_queue(self):
        while self.queue.tasks:
            task, _, _ = self.queue.tasks.pop(0)
            asyncio.run(self.handler.handle(task))

    def test_pending_then_fetched(self):
        lookup = self.get_rate()
        assert lookup.status == "pending"
        assert lookup.response.rate == ""
        assert self.queue.last[0] == FetchRateTask(date=TODAY, provider="cbr", load_previous=1)

        provider = self.stack.provider
        provider.serve(TODAY, {"USD": "75.0", "EUR": "90.0"})
        provider.serve(MONDAY, {"USD": "78.0", "EUR": "93.0"})
        self.drain_queue()
        assert provider.calls == [TODAY, MONDAY]

        lookup = self.get_rate()
        assert lookup.status == "ok"
        assert lookup.response.rate == "75.0"
        assert lookup.response.diff == "-3.00000000"
        assert lookup.response.date_diff == MONDAY

    def test_provisional_answer_queues_previous_day(self):
        self.stack.repository.add(TODAY, "USD", "RUB", "75.0", 1)
        lookup = self.get_rate()
        assert lookup.status == "pending"
        assert lookup.response.rate == "75.0"
        assert lookup.response.diff is None
        assert self.queue.last[0] == FetchRateTask(date=MONDAY, provider="cbr")

    def test_older_day_answer_queues_requested_date(self):
        self.stack.repository.add(date(2026, 2, 5), "USD", "RUB", "81.0", 1)
        self.stack.repository.add(FRIDAY, "USD", "RUB", "80.0", 1)
        lookup = self.get_rate()
        assert lookup.status == "pending"
        assert lookup.response.date == FRIDAY
        assert self.queue.last[0] == FetchRateTask(date=TODAY, provider="cbr", load_previous=1)

        self.stack.repository.add(MONDAY, "USD", "RUB", "78.0", 1)
        self.stack.repository.add(TODAY, "USD", "RUB", "75.0", 1)
        lookup = self.get_rate()
        assert lookup.status == "ok"
        assert lookup.response.date == TODAY

    def test_fetch_is_delayed_near_quota(self):
        for _ in range(95):
            self.stack.rate_limits.increment(1, 3600)
        self.get_rate()
        task, delay, _ = self.queue.last
        assert task.date == TODAY
        assert delay == 360

    def test_fetch_is_not_delayed_far_from_quota(self):
        self.get_rate()
        assert self.queue.last[1] == 0

    def test_cross_rate_lookup(self):
        self.stack.repository.add(TODAY, "USD", "RUB", "75.00", 1)
        self.stack.repository.add(TODAY, "EUR", "RUB", "90.00", 1)
        lookup = self.get_rate(currency="EUR", base_currency="USD")
        assert lookup.response.rate == "1.20000000"

    def test_date_defaults_to_today(self):
        self.get_rate(on=None)
        assert self.queue.last[0].date == TODAY

    @pytest.mark.parametrize(
        "params",
        [
            {"on": date(2026, 2, 11)},
            {"on": date(1992, 6, 30)},
            {"currency": "usd"},
            {"currency": "US"},
            {"base_currency": "TOOLONG"},
            {"provider": "nope"},
        ],
    )
    def test_invalid_parameters(self, params):
        with pytest.raises(ValidationError):
            self.get_rate(**params)
        assert self.queue.tasks == []

    def test_timeseries(self):
        self.stack.repository.add(MONDAY, "USD", "RUB", "78.0", 1)
        self.stack.repository.add(TODAY, "USD", "RUB", "75.0", 1)
        response = asyncio.run(self.service.get_timeseries(MONDAY, TODAY, "USD", "RUB", "cbr"))
        assert response.rates == {MONDAY: "78.0", TODAY: "75.0"}

    def test_timeseries_range_order(self):
        with pytest.raises(ValidationError):
            asyncio.run(self.service.get_timeseries(TODAY, MONDAY, "USD", "RUB", "cbr"))


class TestRateRequest:
    def test_defaults(self):
        request = RateRequest.model_validate({"currency": "USD", "date": None}, context={"today": TODAY})
        assert request.date == TODAY
        assert request.base_currency == "EUR"
        assert request.provider == ProviderKey.ECB

    def test_min_date_is_accepted(self):
        request = RateRequest.model_validate({"currency": "USD", "date": MIN_DATE}, context={"today": TODAY})
        assert request.date == MIN_DATE

    def test_crypto_codes(self):
        request = RateRequest.model_validate(
            {"currency": "USDT", "date": TODAY, "provider": "binance"}, context={"today": TODAY}
        )
        assert request.provider == ProviderKey.BINANCE
