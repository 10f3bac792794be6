"""
Open Exchange Rates (app_id authenticated, USD base).
"""

from datetime import date

from ratekeeper.config import Settings
from ratekeeper.decimal_math import round_half_up
from ratekeeper.errors import ParseFailure
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, timestamp_date
from ratekeeper.providers.currencies import WORLD_CURRENCIES


class OpenExchangeRatesProvider(BaseRateProvider):
    KEY = ProviderKey.OPEN_EXCHANGE_RATES
    BASE_CURRENCY = "USD"
    HOME_PAGE = "https://openexchangerates.org"
    DESCRIPTION = (
        "Simple, accurate and transparent exchange rates and currency "
        "conversion data API."
    )
    CURRENCIES = WORLD_CURRENCIES + ("DASH", "DOGE", "ETH", "LTC", "XMR", "XRP")
    REQUEST_LIMIT = 100
    REQUEST_LIMIT_PERIOD = 86400

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.app_id = self.require_credential(settings.open_exchange_rates_app_id)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        base_url = self.settings.open_exchange_rates_url.rstrip("/")
        url = f"{base_url}/latest.json" if self.is_today(on) else f"{base_url}/historical/{on.isoformat()}.json"
        data = await self.fetch_json(url, params={"app_id": self.app_id, "show_alternative": 1})

        if data.get("error"):
            raise ParseFailure(
                data.get("description") or "Failed to parse Open Exchange Rates response",
                self.service_key,
                str(data),
            )

        rates = {
            code: round_half_up(value, self.precision)
            for code, value in data.get("rates", {}).items()
        }
        return self.result(timestamp_date(data["timestamp"]), rates)
