"""
European Central Bank reference rates.

The ECB publishes three bundles: today, the last 90 days and the full history. The
bundle is picked by the age of the requested date, then searched for the latest
Cube on or before that date.
"""

from datetime import date

from ratekeeper.decimal_math import round_half_up
from ratekeeper.errors import ParseFailure
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider
from ratekeeper.providers.currencies import ECB_CURRENCIES

NAMESPACES = {
    "gesmes": "http://www.gesmes.org/xml/2002-08-01",
    "ns": "http://www.ecb.int/vocabulary/2002-08-01/eurofxref",
}


class ECBProvider(BaseRateProvider):
    KEY = ProviderKey.ECB
    BASE_CURRENCY = "EUR"
    HOME_PAGE = "https://www.ecb.europa.eu"
    DESCRIPTION = (
        "The European Central Bank (ECB) is the central bank of the European Union "
        "countries which have adopted the euro."
    )
    CURRENCIES = ECB_CURRENCIES

    def url_for(self, on: date) -> str:
        base_url = self.settings.ecb_url.rstrip("/")
        age = abs((self._today() - on).days)
        if age <= 1:
            return f"{base_url}/eurofxref-daily.xml"
        if age <= 90:
            return f"{base_url}/eurofxref-hist-90d.xml"
        return f"{base_url}/eurofxref-hist.xml"

    async def get_rates_by_date(self, on: date) -> RatesResult:
        root = await self.fetch_xml(self.url_for(on))

        target = on.isoformat()
        best = None
        for cube in root.iterfind(".//ns:Cube[@time]", NAMESPACES):
            published = cube.get("time", "")
            if published <= target and (best is None or published > best.get("time")):
                best = cube

        if best is None:
            raise ParseFailure(f"No ECB rates found for date {target}", self.service_key)

        rates = {
            rate.get("currency"): round_half_up(rate.get("rate"), self.precision)
            for rate in best.iterfind("ns:Cube", NAMESPACES)
        }
        return self.result(date.fromisoformat(best.get("time")), rates)
