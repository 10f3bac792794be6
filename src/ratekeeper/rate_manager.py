"""
Rate Manager: resolves stored rates into answers for any currency pair.

A provider stores rates against its own base currency. Pairs with another base are
triangulated through it: rate(C/B) = rate(C/P) / rate(B/P). Each leg resolves
against the provider base, so the recursion is one level deep.
"""

import logging
from datetime import date, timedelta

from ratekeeper.cache import CorrectedDayCache, RateCache, TimeseriesCache
from ratekeeper.config import Settings
from ratekeeper.decimal_math import compare, div, sub
from ratekeeper.errors import RateNotFound
from ratekeeper.models import ProviderKey, RateResponse, TimeseriesResponse
from ratekeeper.providers import BaseRateProvider
from ratekeeper.registry import ProviderRegistry
from ratekeeper.repository import RateRepository

logger = logging.getLogger(__name__)

UNIT_RATE = "1"


class RateManager:
    def __init__(
        self,
        settings: Settings,
        registry: ProviderRegistry,
        repository: RateRepository,
        corrected_days: CorrectedDayCache,
        rate_cache: RateCache,
        timeseries_cache: TimeseriesCache
    ):
        self.precision = settings.currency_precision
        self.registry = registry
        self.repository = repository
        self.corrected_days = corrected_days
        self.rate_cache = rate_cache
        self.timeseries_cache = timeseries_cache

    async def get_rate(
        self,
        on: date,
        currency: str,
        base_currency: str,
        key: str | ProviderKey
    ) -> RateResponse:
        """
        Rate of `currency` against `base_currency` on a date.

        A response without diff is provisional (the date itself or the previous day
        is not stored yet) and is never cached.

        Raises:
            RateNotFound: nothing stored at or before the date
            ProviderNotFound, DisabledProvider: provider cannot be used
        """
        provider = self.registry.get(key)
        resolved = self.corrected_days.resolve(provider.provider_id, on)

        cached = self.rate_cache.get(provider.service_key, resolved, base_currency, currency)
        if cached is not None:
            return cached

        if provider.base_currency == base_currency:
            response = await self._direct_rate(provider, resolved, currency)
        else:
            response = await self._cross_rate(provider, resolved, currency, base_currency)

        if response.has_diff:
            self.rate_cache.set(provider.service_key, resolved, base_currency, currency, response)
        return response

    async def _direct_rate(self, provider: BaseRateProvider, on: date, currency: str) -> RateResponse:
        records = await self.repository.find_recent_records(
            provider.provider_id, currency, provider.base_currency, on, limit=2
        )
        if not records:
            raise RateNotFound(currency, provider.base_currency)

        current = records[0]
        response = RateResponse(rate=current.rate, date=current.date)
        # An older day standing in for a missing one is never final
        if current.date != on or len(records) < 2:
            return response

        previous = records[1]
        expected = self.corrected_days.resolve(provider.provider_id, current.date - timedelta(days=1))
        if previous.date == expected:
            response.diff = sub(current.rate, previous.rate, self.precision)
            response.date_diff = previous.date
        return response

    async def _leg(self, provider: BaseRateProvider, on: date, currency: str) -> RateResponse | None:
        """One side of a cross rate; None for the provider base itself (always 1)."""
        if currency == provider.base_currency:
            return None
        return await self.get_rate(on, currency, provider.base_currency, provider.service_key)

    async def _cross_rate(
        self,
        provider: BaseRateProvider,
        on: date,
        currency: str,
        base_currency: str
    ) -> RateResponse:
        target = await self._leg(provider, on, currency)
        base = await self._leg(provider, on, base_currency)
        anchor = target or base

        target_rate = target.rate if target else UNIT_RATE
        base_rate = base.rate if base else UNIT_RATE
        response = RateResponse(rate=div(target_rate, base_rate, self.precision), date=anchor.date)

        target_diff = target.diff if target else "0"
        base_diff = base.diff if base else "0"
        if target_diff is None or base_diff is None:
            return response

        target_prev = sub(target_rate, target_diff, self.precision)
        base_prev = sub(base_rate, base_diff, self.precision)
        if compare(base_prev, "0", self.precision) == 0:
            logger.warning(
                f"Zero previous rate for {base_currency}/{provider.base_currency} "
                f"from {provider.service_key} on {on}"
            )
            return response

        previous = div(target_prev, base_prev, self.precision)
        response.diff = sub(response.rate, previous, self.precision)
        response.date_diff = anchor.date_diff
        return response

    async def get_timeseries(
        self,
        start: date,
        end: date,
        currency: str,
        base_currency: str,
        key: str | ProviderKey
    ) -> TimeseriesResponse:
        """Stored rates of a pair over [start, end]; days missing on either leg are left out."""
        provider = self.registry.get(key)
        cached = self.timeseries_cache.get(provider.service_key, base_currency, currency, start, end)
        if cached is not None:
            return cached

        if provider.base_currency == base_currency:
            rates = await self.repository.find_date_map(
                provider.provider_id, currency, base_currency, start, end
            )
        else:
            rates = await self._cross_series(provider, start, end, currency, base_currency)

        response = TimeseriesResponse(
            base_currency=base_currency,
            currency=currency,
            start_date=start,
            end_date=end,
            rates=rates,
        )
        self.timeseries_cache.set(provider.service_key, response)
        return response

    async def _cross_series(
        self,
        provider: BaseRateProvider,
        start: date,
        end: date,
        currency: str,
        base_currency: str
    ) -> dict[date, str]:
        async def series(code: str) -> dict[date, str] | None:
            if code == provider.base_currency:
                return None
            return await self.repository.find_date_map(
                provider.provider_id, code, provider.base_currency, start, end
            )

        targets = await series(currency)
        bases = await series(base_currency)
        days = sorted(set(targets or {}) | set(bases or {}))

        rates: dict[date, str] = {}
        for day in days:
            target_rate = targets.get(day) if targets is not None else UNIT_RATE
            base_rate = bases.get(day) if bases is not None else UNIT_RATE
            if target_rate is None or base_rate is None:
                continue
            if compare(base_rate, "0", self.precision) == 0:
                continue
            rates[day] = div(target_rate, base_rate, self.precision)
        return rates
