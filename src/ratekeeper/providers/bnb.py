"""
Bulgarian National Bank.

The XML export is served from the statistics search page; an answer that is not XML
(the page falls back to HTML on days without fixing) counts as an empty day.
"""

import logging
from datetime import date

from ratekeeper.decimal_math import div
from ratekeeper.errors import ParseFailure
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, parse_date
from ratekeeper.providers.currencies import ECB_CURRENCIES

logger = logging.getLogger(__name__)


class BNBProvider(BaseRateProvider):
    KEY = ProviderKey.BNB
    BASE_CURRENCY = "BGN"
    HOME_PAGE = "https://www.bnb.bg"
    DESCRIPTION = "Bulgarian National Bank"
    CURRENCIES = ECB_CURRENCIES

    async def get_rates_by_date(self, on: date) -> RatesResult:
        params = {
            "lang": "EN",
            "downloadOper": "true",
            "group1": "first",
            "firstDays": f"{on:%d}",
            "firstMonths": f"{on:%m}",
            "firstYear": f"{on:%Y}",
            "search": "true",
            "showChart": "false",
            "showChartButton": "false",
            "type": "XML",
        }
        try:
            root = await self.fetch_xml(self.settings.bnb_url, params=params)
        except ParseFailure:
            logger.info(f"BNB: no XML export for {on}")
            return self.result(on)

        rates: dict[str, str] = {}
        actual = None
        for row in root.iterfind("ROW"):
            if row.find("TITLE") is not None:
                continue
            code = row.findtext("CODE")
            rate = (row.findtext("RATE") or "").strip()
            ratio = (row.findtext("RATIO") or "1").strip()
            if code and rate:
                rates[code] = div(rate, ratio, self.precision)
            if actual is None:
                actual = parse_date(row.findtext("CURR_DATE"), "%d.%m.%Y")
        return self.result(actual or on, rates)
