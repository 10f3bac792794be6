"""
Provider importer: one fetch-and-persist cycle for a provider and a date.
"""

import logging
import math
import time
from datetime import date, timedelta
from typing import Callable

from ratekeeper.cache import CorrectedDayCache, RateLimitCache
from ratekeeper.config import Settings
from ratekeeper.errors import LimitExceeded, NoDataAvailable
from ratekeeper.models import FetchStatus, ProviderKey, RatesResult
from ratekeeper.providers import BaseRateProvider
from ratekeeper.registry import ProviderRegistry
from ratekeeper.repository import RateRepository

logger = logging.getLogger(__name__)


class ProviderImporter:
    """
    Runs the ordered import steps: block check, lag check, existing-data check,
    fetch, request bookkeeping, empty handling, currency consistency, day
    correction and persistence.
    """

    def __init__(
        self,
        settings: Settings,
        registry: ProviderRegistry,
        repository: RateRepository,
        rate_limits: RateLimitCache,
        corrected_days: CorrectedDayCache,
        today: Callable[[], date] = date.today,
        clock: Callable[[], float] = time.time
    ):
        self.settings = settings
        self.registry = registry
        self.repository = repository
        self.rate_limits = rate_limits
        self.corrected_days = corrected_days
        self._today = today
        self._clock = clock

    async def fetch_and_save_rates(self, key: str | ProviderKey, on: date) -> tuple[FetchStatus, date]:
        """
        Fetch rates of one provider for a date and store them.

        Returns:
            (status, date) where date is the day the stored (or found) data applies to

        Raises:
            ProviderNotFound, DisabledProvider: provider cannot be used
            LimitExceeded: provider is blocked or just throttled us
            NoDataAvailable: the date is inside the provider's reporting lag
            ProviderError: fetch failed
        """
        provider = self.registry.get(key)
        provider_id = provider.provider_id

        blocked_until = self.rate_limits.get_blocked_until(provider_id)
        if blocked_until is not None:
            remaining = max(math.ceil(blocked_until - self._clock()), 1)
            raise LimitExceeded(remaining, provider.service_key)

        if provider.days_lag > 0:
            available = self._today() - timedelta(days=provider.days_lag)
            if on > available:
                raise NoDataAvailable(available)

        existing = await self._find_existing(provider, on)
        if existing is not None:
            logger.debug(f"Rates of {provider.service_key} for {on} already stored as {existing}")
            return FetchStatus.ALREADY_EXISTS, existing

        try:
            result = await provider.get_rates_by_date(on)
        except LimitExceeded as e:
            self.rate_limits.block(provider_id, e.retry_after)
            raise
        self.rate_limits.increment(provider_id, provider.request_limit_period)

        if result.is_empty:
            logger.info(f"No rates from {provider.service_key} for {on} (checked {result.date})")
            return FetchStatus.EMPTY, result.date

        self._check_currencies(provider, result)

        if result.date < on:
            self._record_corrections(provider_id, on, result.date)

        inserted = await self.repository.insert_rates_if_absent(
            result.date, provider_id, result.base_currency, result.rates
        )
        logger.info(
            f"Saved {inserted}/{len(result.rates)} rates from {provider.service_key} "
            f"for {result.date} (requested {on})"
        )
        return FetchStatus.SUCCESS, result.date

    async def _find_existing(self, provider: BaseRateProvider, on: date) -> date | None:
        """Date of already stored data answering a request for `on`, if any."""
        resolved = self.corrected_days.resolve(provider.provider_id, on)
        if (on - resolved).days > self.settings.existing_data_window_days:
            return None
        if await self.repository.record_exists(provider.provider_id, provider.base_currency, resolved):
            return resolved
        return None

    def _check_currencies(self, provider: BaseRateProvider, result: RatesResult) -> None:
        declared = set(provider.available_currencies)
        fetched = set(result.rates)
        missing = sorted(declared - fetched)
        extra = sorted(fetched - declared)
        if missing or extra:
            logger.info(
                f"Currency mismatch: provider={provider.service_key} "
                f"missing_in_fetched={missing} extra_in_fetched={extra} date={result.date}"
            )

    def _record_corrections(self, provider_id: int, requested: date, actual: date) -> None:
        day = actual + timedelta(days=1)
        while day <= requested:
            self.corrected_days.set_corrected_day(provider_id, day, actual)
            day += timedelta(days=1)
