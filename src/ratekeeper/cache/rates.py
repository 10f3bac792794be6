"""
Result caches for the rate resolver.
"""

from datetime import date

from ratekeeper.cache.backend import CacheBackend
from ratekeeper.models import RateResponse, TimeseriesResponse


class RateCache:
    """Complete (diff-bearing) rate answers."""

    def __init__(self, backend: CacheBackend, ttl: int | None = None):
        self._backend = backend
        self._ttl = ttl

    @staticmethod
    def _key(provider: str, on: date, base_currency: str, currency: str) -> str:
        return f"rate_{provider}_{on.isoformat()}_{base_currency}_{currency}"

    def get(self, provider: str, on: date, base_currency: str, currency: str) -> RateResponse | None:
        return self._backend.get(self._key(provider, on, base_currency, currency))

    def set(self, provider: str, on: date, base_currency: str, currency: str, response: RateResponse) -> None:
        self._backend.set(self._key(provider, on, base_currency, currency), response, ttl=self._ttl)


class TimeseriesCache:
    def __init__(self, backend: CacheBackend, ttl: int = 86400):
        self._backend = backend
        self._ttl = ttl

    @staticmethod
    def _key(provider: str, base_currency: str, currency: str, start: date, end: date) -> str:
        return f"ts_{provider}_{base_currency}_{currency}_{start.isoformat()}_{end.isoformat()}"

    def get(
        self, provider: str, base_currency: str, currency: str, start: date, end: date
    ) -> TimeseriesResponse | None:
        return self._backend.get(self._key(provider, base_currency, currency, start, end))

    def set(self, provider: str, response: TimeseriesResponse) -> None:
        key = self._key(
            provider, response.base_currency, response.currency, response.start_date, response.end_date
        )
        self._backend.set(key, response, ttl=self._ttl)
