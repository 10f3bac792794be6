"""
Frankfurter API Client

API Documentation: https://www.frankfurter.app/docs/
Republishes ECB reference rates; a weekend request answers with the previous
business day, reported in the "date" field.
"""

from datetime import date

from ratekeeper.decimal_math import round_half_up
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, parse_date
from ratekeeper.providers.currencies import ECB_CURRENCIES


class FrankfurterProvider(BaseRateProvider):
    KEY = ProviderKey.FRANKFURTER
    BASE_CURRENCY = "EUR"
    HOME_PAGE = "https://www.frankfurter.app"
    DESCRIPTION = (
        "Frankfurter is an open-source API for current and historical foreign exchange "
        "rates published by the European Central Bank."
    )
    CURRENCIES = ECB_CURRENCIES
    REQUEST_DELAY = 1

    async def get_rates_by_date(self, on: date) -> RatesResult:
        url = f"{self.settings.frankfurter_url.rstrip('/')}/{on.isoformat()}"
        data = await self.fetch_json(url, params={"base": self.base_currency})

        actual = parse_date(data.get("date")) or on
        rates = {
            code: round_half_up(value, self.precision)
            for code, value in data.get("rates", {}).items()
        }
        return self.result(actual, rates)
