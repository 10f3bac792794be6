"""
Banco de México SIE API.

All series are requested in one call. Quota errors come back in the body
(error.secondsToReset) rather than as HTTP 429.
"""

import json
import logging
from datetime import date

from ratekeeper.config import Settings
from ratekeeper.decimal_math import is_numeric, round_half_up
from ratekeeper.errors import LimitExceeded, ParseFailure
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider
from ratekeeper.providers.http import prepare_url

logger = logging.getLogger(__name__)

SERIES_MAP = {
    "USD": "SF43718",
    "EUR": "SF46410",
    "JPY": "SF46406",
    "GBP": "SF46407",
    "CAD": "SF60632",
}


class BanxicoProvider(BaseRateProvider):
    KEY = ProviderKey.BANXICO
    BASE_CURRENCY = "MXN"
    HOME_PAGE = "https://www.banxico.org.mx"
    DESCRIPTION = "Banco de México (Banxico) provides official economic indicators and exchange rates for Mexico."
    CURRENCIES = tuple(SERIES_MAP)
    REQUEST_LIMIT = 10000
    REQUEST_LIMIT_PERIOD = 86500

    def __init__(self, client, settings: Settings, **kwargs):
        super().__init__(client, settings, **kwargs)
        self.token = self.require_credential(settings.banxico_token)

    async def get_rates_by_date(self, on: date) -> RatesResult:
        url = prepare_url(
            self.settings.banxico_url, on, self.base_currency, ",".join(SERIES_MAP.values())
        )
        data = await self.fetch_json(url, headers={"Bmx-Token": self.token})

        error = data.get("error")
        if error:
            if isinstance(error, dict) and "secondsToReset" in error:
                raise LimitExceeded(int(error["secondsToReset"]), self.service_key)
            raise ParseFailure("Banxico returned an error", self.service_key, json.dumps(data, default=str))

        currency_by_series = {series_id: code for code, series_id in SERIES_MAP.items()}
        rates: dict[str, str] = {}
        for series in data.get("bmx", {}).get("series", []):
            currency = currency_by_series.get(series.get("idSerie"))
            points = series.get("datos") or []
            if not currency or not points:
                continue
            value = points[0].get("dato")
            # "N/E" marks a day without fixing
            if is_numeric(value):
                rates[currency] = round_half_up(value, self.precision)
            else:
                logger.info(f"Banxico: no value for {currency} on {on}: {value!r}")
        return self.result(on, rates)
