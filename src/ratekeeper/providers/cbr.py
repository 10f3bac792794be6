"""
Central Bank of Russia (CBR) daily rates.

API Documentation: https://www.cbr.ru/development/SXML/
Response: XML ValCurs/Valute, values use a comma separator and are quoted per Nominal units.
"""

import logging
from datetime import date

from ratekeeper.decimal_math import div
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, parse_date
from ratekeeper.providers.http import prepare_url

logger = logging.getLogger(__name__)


class CBRProvider(BaseRateProvider):
    KEY = ProviderKey.CBR
    BASE_CURRENCY = "RUB"
    HOME_PAGE = "https://cbr.ru"
    DESCRIPTION = "Central Bank of the Russian Federation"
    CURRENCIES = (
        "AED", "AMD", "AUD", "AZN", "BDT", "BHD", "BOB", "BRL", "BYN", "CAD", "CHF", "CNY", "CUP",
        "CZK", "DKK", "DZD", "EGP", "ETB", "EUR", "GBP", "GEL", "HKD", "HUF", "IDR", "INR", "IRR",
        "JPY", "KGS", "KRW", "KZT", "MDL", "MMK", "MNT", "NGN", "NOK", "NZD", "OMR", "PLN", "QAR",
        "RON", "RSD", "SAR", "SEK", "SGD", "THB", "TJS", "TMT", "TRY", "UAH", "USD", "UZS", "VND",
        "XDR", "ZAR",
    )

    async def get_rates_by_date(self, on: date) -> RatesResult:
        url = prepare_url(self.settings.cbr_url, on, self.base_currency)
        root = await self.fetch_xml(url)

        rates: dict[str, str] = {}
        for valute in root.findall("Valute"):
            code = valute.findtext("CharCode")
            value = valute.findtext("Value")
            nominal = valute.findtext("Nominal")
            if code and value and nominal:
                # Rate per 1 unit
                rates[code] = div(value, nominal, self.precision)

        actual = parse_date(root.get("Date"), "%d.%m.%Y") or on
        logger.info(f"CBR fetched {len(rates)} rates for {on} (published {actual})")
        return self.result(actual, rates)
