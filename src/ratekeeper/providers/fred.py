"""
Federal Reserve Economic Data (FRED) H.10 daily series.

One request per currency series. Series quoted as USD per unit of the foreign currency
are inverted. FRED publishes with a lag of about two weeks.
"""

import logging
from datetime import date

from ratekeeper.config import Settings
from ratekeeper.decimal_math import compare, div, is_numeric, round_half_up
from ratekeeper.errors import LimitExceeded, ProviderError
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider

logger = logging.getLogger(__name__)

# currency -> (series id, invert, first observation)
SERIES_MAP: dict[str, tuple[str, bool, date]] = {
    "EUR": ("DEXUSEU", True, date(1999, 1, 4)),
    "JPY": ("DEXJPUS", False, date(1971, 1, 4)),
    "CNY": ("DEXCHUS", False, date(1981, 1, 2)),
    "GBP": ("DEXUSUK", True, date(1971, 1, 4)),
    "CAD": ("DEXCAUS", False, date(1971, 1, 4)),
    "AUD": ("DEXUSAL", True, date(1971, 1, 4)),
    "NZD": ("DEXUSNZ", True, date(1971, 1, 4)),
    "BRL": ("DEXBZUS", False, date(1995, 1, 2)),
    "MXN": ("DEXMXUS", False, date(1993, 11, 8)),
    "CHF": ("DEXSZUS", False, date(1971, 1, 4)),
    "INR": ("DEXINUS", False, date(1973, 1, 2)),
    "ZAR": ("DEXSFUS", False, date(1980, 1, 2)),
    "HKD": ("DEXHKUS", False, date(1981, 1, 2)),
    "KRW": ("DEXKOUS", False, date(1981, 4, 13)),
    "MYR": ("DEXMAUS", False, date(1971, 1, 4)),
    "NOK": ("DEXNOUS", False, date(1971, 1, 4)),
    "SGD": ("DEXSIUS", False, date(1981, 1, 2)),
    "THB": ("DEXTHUS", False, date(1981, 1, 2)),
    "DKK": ("DEXDNUS", False, date(1971, 1, 4)),
    "SEK": ("DEXSDUS", False, date(1971, 1, 4)),
    "LKR": ("DEXSLUS", False, date(1973, 1, 2)),
    "TWD": ("DEXTAUS", False, date(1983, 10, 3)),
    "VES": ("DEXVZUS", False, date(2000, 1, 3)),
}


class FREDProvider(BaseRateProvider):
    KEY = ProviderKey.FRED
    BASE_CURRENCY = "USD"
    HOME_PAGE = "https://fred.stlouisfed.org"
    DESCRIPTION = (
        "Federal Reserve Economic Data (FRED) is a database maintained by the Research "
        "division of the Federal Reserve Bank of St. Louis."
    )
    CURRENCIES = tuple(SERIES_MAP)
    DAYS_LAG = 11
    REQUEST_LIMIT = 120
    REQUEST_LIMIT_PERIOD = 60
    REQUEST_DELAY = 1

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.api_key = self.require_credential(settings.fred_api_key)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        url = f"{self.settings.fred_url.rstrip('/')}/series/observations"

        rates: dict[str, str] = {}
        skipped: list[str] = []
        for currency, (series_id, invert, observation_start) in SERIES_MAP.items():
            if observation_start > on:
                continue
            params = {
                "series_id": series_id,
                "api_key": self.api_key,
                "file_type": "json",
                "observation_start": on.isoformat(),
                "observation_end": on.isoformat(),
            }
            try:
                data = await self.fetch_json(url, params=params)
            except LimitExceeded:
                raise
            except ProviderError as e:
                logger.warning(f"FRED: skipping {series_id} for {on}: {e}")
                skipped.append(currency)
                continue

            observations = data.get("observations") or []
            if not observations:
                continue
            # "." marks a missing observation
            value = observations[0].get("value")
            if not is_numeric(value):
                continue

            if not invert:
                rates[currency] = round_half_up(value, self.precision)
            elif compare(value, "0", self.precision) > 0:
                rates[currency] = div("1", value, self.precision)

        if skipped:
            logger.warning(f"FRED: partial result for {on}, skipped {skipped}")
        return self.result(on, rates)
