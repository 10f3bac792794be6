"""
AbstractAPI exchange rates (historical endpoint).
"""

from datetime import date

from ratekeeper.config import Settings
from ratekeeper.decimal_math import round_half_up
from ratekeeper.errors import ParseFailure
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, timestamp_date
from ratekeeper.providers.currencies import WORLD_CURRENCIES
from ratekeeper.providers.http import prepare_url


class AbstractApiProvider(BaseRateProvider):
    KEY = ProviderKey.ABSTRACT_API
    BASE_CURRENCY = "USD"
    HOME_PAGE = "https://abstractapi.com"
    DESCRIPTION = "Abstract provides APIs to enrich user experience or automate workflows."
    CURRENCIES = WORLD_CURRENCIES
    # Free plan
    REQUEST_LIMIT = 500
    REQUEST_LIMIT_PERIOD = 86400 * 31
    # Monthly quota exhausted
    ACTIVE = False

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.api_key = self.require_credential(settings.abstract_api_key)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        url = prepare_url(self.settings.abstract_api_url, on, self.base_currency, api_key=self.api_key)
        data = await self.fetch_json(url)
        if "exchange_rates" not in data:
            raise ParseFailure("Failed to parse AbstractApi response", self.service_key, str(data))

        actual = timestamp_date(data["last_updated"]) if data.get("last_updated") else on
        rates = {
            code: round_half_up(value, self.precision)
            for code, value in data["exchange_rates"].items()
        }
        return self.result(actual, rates)
