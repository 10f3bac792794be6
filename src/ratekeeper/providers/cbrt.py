"""
Central Bank of the Republic of Turkey.

There is no file for non-business days (HTTP 404), so the adapter steps back one day
at a time, giving up with an empty result after MAX_LOOKBACK attempts.
"""

import logging
from datetime import date, timedelta

from ratekeeper.decimal_math import div
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, parse_date
from ratekeeper.providers.http import parse_xml, raise_for_status

logger = logging.getLogger(__name__)


class CBRTProvider(BaseRateProvider):
    KEY = ProviderKey.CBRT
    BASE_CURRENCY = "TRY"
    HOME_PAGE = "https://www.tcmb.gov.tr"
    DESCRIPTION = "Central Bank of the Republic of Turkey"
    CURRENCIES = (
        "AED", "AUD", "AZN", "CAD", "CHF", "CNY", "DKK", "EUR", "GBP", "JPY", "KRW", "KWD", "KZT",
        "NOK", "PKR", "QAR", "RON", "RUB", "SAR", "SEK", "USD",
    )
    MAX_LOOKBACK = 10

    def url_for(self, on: date) -> str:
        base_url = self.settings.cbrt_url.rstrip("/")
        if self.is_today(on):
            return f"{base_url}/today.xml"
        return f"{base_url}/{on:%Y%m}/{on:%d%m%Y}.xml"

    async def get_rates_by_date(self, on: date) -> RatesResult:
        return await self._rates_on_or_before(on, attempt=1)

    async def _rates_on_or_before(self, on: date, attempt: int) -> RatesResult:
        response = await self.fetch(self.url_for(on))
        if response.status_code == 404:
            if attempt > self.MAX_LOOKBACK:
                logger.info(f"CBRT: no file within {self.MAX_LOOKBACK} days before {on}")
                return self.result(on)
            return await self._rates_on_or_before(on - timedelta(days=1), attempt + 1)

        raise_for_status(response, self.service_key)
        root = parse_xml(response, self.service_key)

        rates: dict[str, str] = {}
        for currency in root.iterfind("Currency"):
            code = currency.get("CurrencyCode")
            value = (currency.findtext("ForexSelling") or "").strip()
            unit = (currency.findtext("Unit") or "1").strip()
            if code and value:
                rates[code] = div(value, unit, self.precision)

        actual = parse_date(root.get("Date"), "%m/%d/%Y") or on
        return self.result(actual, rates)
