"""
Rate resolver tests: direct path, cross rates, corrected days, caching and timeseries.
"""

import asyncio
from datetime import date

import pytest
from conftest import Stack

from ratekeeper.errors import RateNotFound

FRIDAY = date(2026, 2, 6)
SATURDAY = date(2026, 2, 7)
SUNDAY = date(2026, 2, 8)
MONDAY = date(2026, 2, 9)
TUESDAY = date(2026, 2, 10)


class TestDirectRate:
    def setup_method(self):
        self.stack = Stack()
        self.repository = self.stack.repository
        self.manager = self.stack.manager

    def get_rate(self, on, currency="USD", base="RUB"):
        return asyncio.run(self.manager.get_rate(on, currency, base, "cbr"))

    def test_rate_with_diff(self):
        self.repository.add(MONDAY, "USD", "RUB", "78.0", 1)
        self.repository.add(TUESDAY, "USD", "RUB", "75.0", 1)

        response = self.get_rate(TUESDAY)
        assert response.rate == "75.0"
        assert response.date == TUESDAY
        assert response.diff == "-3.00000000"
        assert response.date_diff == MONDAY

    def test_not_found(self):
        with pytest.raises(RateNotFound) as exc_info:
            self.get_rate(TUESDAY)
        assert str(exc_info.value) == "Rate for USD/RUB not exist yet. Try later."

    def test_latest_record_before_date(self):
        self.repository.add(MONDAY, "USD", "RUB", "78.0", 1)
        response = self.get_rate(TUESDAY)
        assert response.rate == "78.0"
        assert response.date == MONDAY

    def test_older_day_is_provisional_until_date_is_stored(self):
        self.repository.add(date(2026, 2, 5), "USD", "RUB", "81.0", 1)
        self.repository.add(FRIDAY, "USD", "RUB", "80.0", 1)

        stale = self.get_rate(TUESDAY)
        assert stale.rate == "80.0"
        assert stale.date == FRIDAY
        assert stale.diff is None
        assert self.stack.cache.get("rate_cbr_2026-02-10_RUB_USD") is None

        self.repository.add(MONDAY, "USD", "RUB", "78.0", 1)
        self.repository.add(TUESDAY, "USD", "RUB", "75.0", 1)
        fresh = self.get_rate(TUESDAY)
        assert fresh.date == TUESDAY
        assert fresh.diff == "-3.00000000"

    def test_single_record_is_provisional_and_not_cached(self):
        self.repository.add(TUESDAY, "USD", "RUB", "75.0", 1)
        response = self.get_rate(TUESDAY)
        assert response.diff is None
        assert self.stack.cache.get("rate_cbr_2026-02-10_RUB_USD") is None

        self.repository.add(MONDAY, "USD", "RUB", "78.0", 1)
        healed = self.get_rate(TUESDAY)
        assert healed.diff == "-3.00000000"
        assert self.stack.cache.get("rate_cbr_2026-02-10_RUB_USD") == healed

    def test_cached_answer_is_reused(self):
        self.repository.add(MONDAY, "USD", "RUB", "78.0", 1)
        self.repository.add(TUESDAY, "USD", "RUB", "75.0", 1)
        first = self.get_rate(TUESDAY)
        self.repository.records.clear()
        assert self.get_rate(TUESDAY) == first

    def test_gap_without_correction_gives_no_diff(self):
        self.repository.add(FRIDAY, "USD", "RUB", "80.0", 1)
        self.repository.add(MONDAY, "USD", "RUB", "78.0", 1)
        assert self.get_rate(MONDAY).diff is None

    def test_weekend_redirects_to_friday(self):
        self.repository.add(date(2026, 2, 5), "USD", "RUB", "81.0", 1)
        self.repository.add(FRIDAY, "USD", "RUB", "80.0", 1)
        self.repository.add(MONDAY, "USD", "RUB", "78.0", 1)
        self.stack.corrected_days.set_corrected_day(1, SATURDAY, FRIDAY)
        self.stack.corrected_days.set_corrected_day(1, SUNDAY, FRIDAY)

        for weekend_day in (SATURDAY, SUNDAY):
            response = self.get_rate(weekend_day)
            assert response.rate == "80.0"
            assert response.date == FRIDAY
            assert response.diff == "-1.00000000"

        monday = self.get_rate(MONDAY)
        assert monday.diff == "-2.00000000"
        assert monday.date_diff == FRIDAY


class TestCrossRate:
    def setup_method(self):
        self.stack = Stack()
        self.repository = self.stack.repository
        self.repository.add(TUESDAY, "USD", "RUB", "75.00", 1)
        self.repository.add(TUESDAY, "EUR", "RUB", "90.00", 1)

    def get_rate(self, currency, base):
        return asyncio.run(self.stack.manager.get_rate(TUESDAY, currency, base, "cbr"))

    def test_triangulation(self):
        response = self.get_rate("EUR", "USD")
        assert response.rate == "1.20000000"
        assert response.date == TUESDAY
        assert response.diff is None

    def test_cross_diff(self):
        self.repository.add(MONDAY, "USD", "RUB", "78.00", 1)
        self.repository.add(MONDAY, "EUR", "RUB", "93.00", 1)

        response = self.get_rate("EUR", "USD")
        assert response.rate == "1.20000000"
        # 93 / 78 = 1.19230769
        assert response.diff == "0.00769231"
        assert response.date_diff == MONDAY
        assert self.stack.cache.get("rate_cbr_2026-02-10_USD_EUR") == response

    def test_missing_leg_diff_propagates(self):
        self.repository.add(MONDAY, "USD", "RUB", "78.00", 1)
        assert self.get_rate("EUR", "USD").diff is None
        assert self.stack.cache.get("rate_cbr_2026-02-10_USD_EUR") is None

    def test_provider_base_as_target(self):
        self.repository.add(MONDAY, "USD", "RUB", "78.00", 1)
        response = self.get_rate("RUB", "USD")
        assert response.rate == "0.01333333"
        # 1 / 78 = 0.01282051
        assert response.diff == "0.00051282"
        assert response.date_diff == MONDAY

    def test_missing_leg(self):
        with pytest.raises(RateNotFound):
            self.get_rate("EUR", "CNY")


class TestTimeseries:
    def setup_method(self):
        self.stack = Stack()
        repository = self.stack.repository
        repository.add(FRIDAY, "USD", "RUB", "80.00", 1)
        repository.add(MONDAY, "USD", "RUB", "78.00", 1)
        repository.add(TUESDAY, "USD", "RUB", "75.00", 1)
        repository.add(MONDAY, "EUR", "RUB", "93.60", 1)
        repository.add(TUESDAY, "EUR", "RUB", "90.00", 1)

    def series(self, currency, base, start=FRIDAY, end=TUESDAY):
        return asyncio.run(self.stack.manager.get_timeseries(start, end, currency, base, "cbr"))

    def test_direct(self):
        response = self.series("USD", "RUB")
        assert response.rates == {FRIDAY: "80.00", MONDAY: "78.00", TUESDAY: "75.00"}
        assert list(response.rates) == [FRIDAY, MONDAY, TUESDAY]

    def test_cross_skips_missing_days(self):
        response = self.series("EUR", "USD")
        assert response.rates == {MONDAY: "1.20000000", TUESDAY: "1.20000000"}
        assert response.base_currency == "USD"
        assert response.currency == "EUR"

    def test_cross_skips_zero_base(self):
        self.stack.repository.add(MONDAY, "CNY", "RUB", "0", 1)
        self.stack.repository.add(TUESDAY, "CNY", "RUB", "10.00", 1)
        response = self.series("EUR", "CNY")
        assert response.rates == {TUESDAY: "9.00000000"}

    def test_provider_base_as_target(self):
        response = self.series("RUB", "USD", start=MONDAY)
        assert response.rates == {MONDAY: "0.01282051", TUESDAY: "0.01333333"}

    def test_result_is_cached(self):
        first = self.series("USD", "RUB")
        assert self.stack.cache.get("ts_cbr_RUB_USD_2026-02-06_2026-02-10") == first
        self.stack.repository.records.clear()
        assert self.series("USD", "RUB") == first

    def test_empty_range_is_cached(self):
        response = self.series("USD", "RUB", start=date(2025, 1, 1), end=date(2025, 1, 5))
        assert response.rates == {}
        assert self.stack.cache.get("ts_cbr_RUB_USD_2025-01-01_2025-01-05") == response
