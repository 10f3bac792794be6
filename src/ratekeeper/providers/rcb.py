"""
Central Bank of the Republic of Uzbekistan (JSON list, rate per Nominal units).
"""

from datetime import date

from ratekeeper.decimal_math import div
from ratekeeper.errors import ParseFailure
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, parse_date
from ratekeeper.providers.http import prepare_url


class RCBProvider(BaseRateProvider):
    KEY = ProviderKey.RCB
    BASE_CURRENCY = "UZS"
    HOME_PAGE = "https://cbu.uz"
    DESCRIPTION = "Central Bank of the Republic of Uzbekistan"
    CURRENCIES = (
        "AED", "AFN", "AMD", "ARS", "AUD", "AZN", "BDT", "BGN", "BHD", "BND", "BRL", "BYN", "CAD",
        "CHF", "CNY", "CUP", "CZK", "DKK", "DZD", "EGP", "EUR", "GBP", "GEL", "HKD", "HUF", "IDR",
        "ILS", "INR", "IQD", "IRR", "ISK", "JOD", "JPY", "KHR", "KGS", "KRW", "KWD", "KZT", "LAK",
        "LBP", "LYD", "MAD", "MDL", "MMK", "MNT", "MXN", "MYR", "NOK", "NZD", "OMR", "PHP", "PKR",
        "PLN", "QAR", "RON", "RSD", "RUB", "SAR", "SDG", "SEK", "SGD", "SYP", "THB", "TJS", "TMT",
        "TND", "TRY", "UAH", "USD", "UYU", "VES", "VND", "XDR", "YER", "ZAR",
    )

    async def get_rates_by_date(self, on: date) -> RatesResult:
        data = await self.fetch_json(prepare_url(self.settings.rcb_url, on, self.base_currency))
        if not isinstance(data, list):
            raise ParseFailure("Expected a JSON list", self.service_key, str(data))

        rates: dict[str, str] = {}
        actual = on
        for item in data:
            rates[item["Ccy"]] = div(item["Rate"], item["Nominal"], self.precision)
            actual = parse_date(item.get("Date"), "%d.%m.%Y") or actual
        return self.result(actual, rates)
