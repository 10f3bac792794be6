"""
Shared test doubles: in-memory storage, a recording queue, a scriptable provider and
a wired stack of the core components.
"""

from datetime import date

import httpx

from ratekeeper.cache import CorrectedDayCache, MemoryCache, RateCache, RateLimitCache, TimeseriesCache
from ratekeeper.config import Settings
from ratekeeper.importer import ProviderImporter
from ratekeeper.models import ProviderKey, RateRecord, RatesResult
from ratekeeper.providers import BaseRateProvider
from ratekeeper.rate_manager import RateManager
from ratekeeper.registry import ProviderRegistry
from ratekeeper.repository import RateRepository
from ratekeeper.worker import FetchRateTask, TaskQueue

TODAY = date(2026, 2, 10)
NOW = 1_770_724_800.0  # 2026-02-10 12:00 UTC


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def make_client(handler) -> httpx.AsyncClient:
    """HTTP client answering every request with handler(request)."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class FakeClock:
    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryRateRepository(RateRepository):
    def __init__(self):
        self.records: dict[tuple, RateRecord] = {}

    def add(self, on: date, currency: str, base_currency: str, rate: str, provider_id: int) -> None:
        self.records[(on, currency, base_currency, provider_id)] = RateRecord(
            date=on, currency=currency, base_currency=base_currency, rate=rate, provider_id=provider_id
        )

    async def insert_rates_if_absent(self, on, provider_id, base_currency, rates) -> int:
        inserted = 0
        for currency, rate in rates.items():
            if (on, currency, base_currency, provider_id) not in self.records:
                self.add(on, currency, base_currency, rate, provider_id)
                inserted += 1
        return inserted

    def _select(self, provider_id, currency, base_currency):
        return [
            r for r in self.records.values()
            if r.provider_id == provider_id and r.currency == currency and r.base_currency == base_currency
        ]

    async def find_recent_records(self, provider_id, currency, base_currency, max_date, limit=2):
        found = [r for r in self._select(provider_id, currency, base_currency) if r.date <= max_date]
        return sorted(found, key=lambda r: r.date, reverse=True)[:limit]

    async def find_records_in_range(self, provider_id, currency, base_currency, start, end):
        found = [r for r in self._select(provider_id, currency, base_currency) if start <= r.date <= end]
        return sorted(found, key=lambda r: r.date)

    async def record_exists(self, provider_id, base_currency, on) -> bool:
        return any(
            r.provider_id == provider_id and r.base_currency == base_currency and r.date == on
            for r in self.records.values()
        )

    async def min_date(self, provider_id=None):
        dates = [r.date for r in self.records.values() if provider_id is None or r.provider_id == provider_id]
        return min(dates) if dates else None


class RecordingQueue(TaskQueue):
    def __init__(self):
        self.tasks: list[tuple[FetchRateTask, int, bool]] = []

    def enqueue(self, task, delay=0, *, continuation=False) -> bool:
        self.tasks.append((task, delay, continuation))
        return True

    @property
    def last(self) -> tuple[FetchRateTask, int, bool]:
        return self.tasks[-1]


class StubProvider(BaseRateProvider):
    """RUB-based provider serving scripted results."""
    KEY = ProviderKey.CBR
    BASE_CURRENCY = "RUB"
    CURRENCIES = ("USD", "EUR")
    REQUEST_LIMIT = 100
    REQUEST_LIMIT_PERIOD = 3600
    REQUEST_DELAY = 2

    def __init__(self, client, settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.responses: dict[date, RatesResult] = {}
        self.calls: list[date] = []
        self.error: Exception | None = None

    def serve(self, on: date, rates: dict[str, str], actual: date | None = None) -> None:
        self.responses[on] = self.result(actual or on, rates)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        self.calls.append(on)
        if self.error is not None:
            raise self.error
        if on in self.responses:
            return self.responses[on]
        return self.result(on)


class LaggingProvider(StubProvider):
    KEY = ProviderKey.FRED
    BASE_CURRENCY = "USD"
    CURRENCIES = ("EUR",)
    DAYS_LAG = 11
    REQUEST_LIMIT = 0
    REQUEST_LIMIT_PERIOD = 0


class InactiveProvider(StubProvider):
    KEY = ProviderKey.ABSTRACT_API
    ACTIVE = False


class Stack:
    """Core components wired on in-memory doubles."""

    def __init__(self, **settings_overrides):
        self.settings = make_settings(**settings_overrides)
        self.clock = FakeClock()
        self.cache = MemoryCache(clock=self.clock)
        self.repository = InMemoryRateRepository()
        self.rate_limits = RateLimitCache(self.cache, clock=self.clock)
        self.corrected_days = CorrectedDayCache(self.cache)
        self.registry = ProviderRegistry(
            self.settings,
            client=None,
            cache=self.cache,
            repository=self.repository,
            factories={
                ProviderKey.CBR: StubProvider,
                ProviderKey.FRED: LaggingProvider,
                ProviderKey.ABSTRACT_API: InactiveProvider,
            },
            today=lambda: TODAY,
        )
        self.importer = ProviderImporter(
            self.settings,
            self.registry,
            self.repository,
            self.rate_limits,
            self.corrected_days,
            today=lambda: TODAY,
            clock=self.clock,
        )
        self.manager = RateManager(
            self.settings,
            self.registry,
            self.repository,
            self.corrected_days,
            RateCache(self.cache),
            TimeseriesCache(self.cache),
        )

    @property
    def provider(self) -> StubProvider:
        return self.registry.get(ProviderKey.CBR)
