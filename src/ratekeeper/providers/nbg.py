"""
National Bank of Georgia (JSON, rate per quantity units).
"""

from datetime import date

from ratekeeper.decimal_math import div
from ratekeeper.errors import ParseFailure
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider
from ratekeeper.providers.http import prepare_url


class NBGProvider(BaseRateProvider):
    KEY = ProviderKey.NBG
    BASE_CURRENCY = "GEL"
    HOME_PAGE = "https://nbg.gov.ge"
    DESCRIPTION = "National Bank of Georgia"
    CURRENCIES = (
        "AED", "AMD", "AUD", "AZN", "BRL", "BYN", "CAD", "CHF", "CNY", "CZK", "DKK", "EGP", "EUR",
        "GBP", "HKD", "HUF", "ILS", "INR", "IRR", "ISK", "JPY", "KGS", "KRW", "KWD", "KZT", "MDL",
        "NOK", "NZD", "PLN", "QAR", "RON", "RSD", "RUB", "SEK", "SGD", "TJS", "TMT", "TRY", "UAH",
        "USD", "UZS", "ZAR",
    )

    async def get_rates_by_date(self, on: date) -> RatesResult:
        data = await self.fetch_json(prepare_url(self.settings.nbg_url, on, self.base_currency))
        if not isinstance(data, list) or not data:
            raise ParseFailure("Failed to parse NBG JSON response", self.service_key, str(data))

        element = data[0]
        # "2025-02-20T00:00:00.000Z"
        actual = date.fromisoformat(str(element["date"])[:10])
        rates = {
            currency["code"]: div(currency["rate"], currency["quantity"], self.precision)
            for currency in element.get("currencies", [])
        }
        return self.result(actual, rates)
