"""
National Bank of Ukraine (XML exchange directory).
"""

from datetime import date

from ratekeeper.decimal_math import round_half_up
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, parse_date
from ratekeeper.providers.http import prepare_url


class NBUProvider(BaseRateProvider):
    KEY = ProviderKey.NBU
    BASE_CURRENCY = "UAH"
    HOME_PAGE = "https://bank.gov.ua"
    DESCRIPTION = "National Bank of Ukraine"
    CURRENCIES = (
        "AED", "AUD", "AZN", "BDT", "CAD", "CHF", "CNY", "CZK", "DKK", "DZD", "EGP", "EUR", "GBP",
        "GEL", "HKD", "HUF", "IDR", "ILS", "INR", "JPY", "KRW", "KZT", "LBP", "MDL", "MXN", "MYR",
        "NOK", "NZD", "PLN", "RON", "RSD", "SAR", "SEK", "SGD", "THB", "TND", "TRY", "USD", "VND",
        "XAG", "XAU", "XPD", "XPT", "XDR", "ZAR",
    )

    async def get_rates_by_date(self, on: date) -> RatesResult:
        root = await self.fetch_xml(prepare_url(self.settings.nbu_url, on, self.base_currency))

        rates: dict[str, str] = {}
        actual = on
        for item in root.iterfind("currency"):
            code = item.findtext("cc")
            rate = item.findtext("rate")
            if code and rate:
                rates[code] = round_half_up(rate, self.precision)
            actual = parse_date(item.findtext("exchangedate"), "%d.%m.%Y") or actual
        return self.result(actual, rates)
