"""
FastForex (latest rates only on the free plan).
"""

from datetime import date

from ratekeeper.config import Settings
from ratekeeper.decimal_math import round_half_up
from ratekeeper.errors import ParseFailure
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, parse_date
from ratekeeper.providers.currencies import WORLD_CURRENCIES


class FastForexProvider(BaseRateProvider):
    KEY = ProviderKey.FAST_FOREX
    BASE_CURRENCY = "USD"
    HOME_PAGE = "https://fastforex.io"
    DESCRIPTION = "Currency exchange API for 160+ world currencies."
    CURRENCIES = WORLD_CURRENCIES
    REQUEST_LIMIT = 100
    REQUEST_LIMIT_PERIOD = 86400

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.api_key = self.require_credential(settings.fast_forex_api_key)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        url = f"{self.settings.fast_forex_url.rstrip('/')}/fetch-all"
        data = await self.fetch_json(url, params={"from": self.base_currency, "api_key": self.api_key})
        if "error" in data:
            raise ParseFailure(str(data["error"]), self.service_key, str(data))

        # "updated": "2025-02-20 10:04:01"
        actual = parse_date(str(data.get("updated", ""))[:10]) or self._today()
        rates = {
            code: round_half_up(value, self.precision)
            for code, value in data.get("results", {}).items()
        }
        return self.result(actual, rates)
