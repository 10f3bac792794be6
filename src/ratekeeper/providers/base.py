"""
Base Rate Provider Interface

Every adapter turns one upstream format into a RatesResult of decimal strings.
Metadata (base currency, limits, lag) lives in class attributes; request plumbing
lives in ratekeeper.providers.http.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable

import httpx

from ratekeeper.config import Settings
from ratekeeper.errors import DisabledProvider, UnsupportedOperation
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers import http


class BaseRateProvider(ABC):
    """
    Abstract base class for exchange rate providers.

    Adapters needing credentials call require_credential() from __init__, so a
    misconfigured provider fails when it is built, not when it is first used.
    """

    KEY: ProviderKey
    BASE_CURRENCY: str
    HOME_PAGE: str = ""
    DESCRIPTION: str = ""
    CURRENCIES: tuple[str, ...] = ()
    DAYS_LAG: int = 0
    REQUEST_LIMIT: int = 0
    REQUEST_LIMIT_PERIOD: int = 0
    REQUEST_DELAY: int = 2
    ACTIVE: bool = True

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        today: Callable[[], date] = date.today
    ):
        self.client = client
        self.settings = settings
        self.precision = settings.currency_precision
        self._today = today

    # === Metadata ===

    @property
    def service_key(self) -> str:
        return self.KEY.value

    @property
    def provider_id(self) -> int:
        return self.KEY.provider_id

    @property
    def base_currency(self) -> str:
        return self.BASE_CURRENCY

    @property
    def home_page(self) -> str:
        return self.HOME_PAGE

    @property
    def description(self) -> str:
        return self.DESCRIPTION

    @property
    def days_lag(self) -> int:
        return self.DAYS_LAG

    @property
    def is_active(self) -> bool:
        return self.ACTIVE

    @property
    def available_currencies(self) -> list[str]:
        return list(self.CURRENCIES)

    @property
    def request_limit(self) -> int:
        return self.REQUEST_LIMIT

    @property
    def request_limit_period(self) -> int:
        return self.REQUEST_LIMIT_PERIOD

    @property
    def request_delay(self) -> int:
        return self.REQUEST_DELAY

    # === Fetching ===

    @abstractmethod
    async def get_rates_by_date(self, on: date) -> RatesResult:
        """
        Fetch rates published for `on`.

        Returns:
            RatesResult whose date is the day the data applies to; empty rates
            when the source has nothing for that day.

        Raises:
            ParseFailure: unexpected payload
            LimitExceeded: source throttled us
            ProviderError: HTTP or transport failure after retries
        """

    async def get_rates_by_range_date(self, start: date, end: date) -> list[RatesResult]:
        raise UnsupportedOperation("Range fetch", self.service_key)

    # === Request shortcuts ===

    async def fetch(self, url: str, params: dict | None = None, headers: dict | None = None):
        return await http.fetch(
            self.client, url, settings=self.settings, provider=self.service_key,
            params=params, headers=headers
        )

    async def fetch_json(self, url: str, params: dict | None = None, headers: dict | None = None):
        return await http.fetch_json(
            self.client, url, settings=self.settings, provider=self.service_key,
            params=params, headers=headers
        )

    async def fetch_xml(self, url: str, params: dict | None = None, headers: dict | None = None):
        return await http.fetch_xml(
            self.client, url, settings=self.settings, provider=self.service_key,
            params=params, headers=headers
        )

    async def fetch_text(self, url: str, params: dict | None = None) -> str:
        return await http.fetch_text(
            self.client, url, settings=self.settings, provider=self.service_key, params=params
        )

    # === Helpers ===

    def is_today(self, on: date) -> bool:
        return on == self._today()

    def require_credential(self, value: str) -> str:
        if not value:
            raise DisabledProvider("Provider disabled: Need API key", self.service_key)
        return value

    def result(self, on: date, rates: dict[str, str] | None = None) -> RatesResult:
        return RatesResult(
            provider_id=self.provider_id,
            base_currency=self.base_currency,
            date=on,
            rates=rates or {},
        )


def parse_date(value: str | None, fmt: str = "%Y-%m-%d") -> date | None:
    """Parse a date in the given strftime format; None when absent or malformed."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), fmt).date()
    except ValueError:
        return None


def timestamp_date(value: int | str | Decimal) -> date:
    """UTC calendar date of a unix timestamp (seconds or milliseconds)."""
    seconds = int(value)
    if seconds > 10**11:
        seconds //= 1000
    return datetime.fromtimestamp(seconds, tz=timezone.utc).date()
