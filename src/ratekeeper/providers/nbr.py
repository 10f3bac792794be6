"""
National Bank of Romania.

Today's rates come from nbrfxrates.xml; history from one XML bundle per year, searched
for the latest Cube on or before the requested date.
"""

from datetime import date

from ratekeeper.decimal_math import div
from ratekeeper.errors import ParseFailure
from ratekeeper.models import ProviderKey, RatesResult
from ratekeeper.providers.base import BaseRateProvider, parse_date

NAMESPACES = {"ns": "http://www.bnr.ro/xsd"}


class NBRProvider(BaseRateProvider):
    KEY = ProviderKey.NBR
    BASE_CURRENCY = "RON"
    HOME_PAGE = "https://bnr.ro"
    DESCRIPTION = "National Bank of Romania"
    CURRENCIES = (
        "AED", "AUD", "BRL", "CAD", "CHF", "CNY", "CZK", "DKK", "EGP", "EUR", "GBP", "HKD", "HUF",
        "IDR", "ILS", "INR", "ISK", "JPY", "KRW", "MDL", "MXN", "MYR", "NOK", "NZD", "PHP", "PLN",
        "RSD", "RUB", "SEK", "SGD", "THB", "TRY", "UAH", "USD", "XAU", "XDR", "ZAR",
    )

    async def get_rates_by_date(self, on: date) -> RatesResult:
        base_url = self.settings.nbr_url.rstrip("/")
        today = self.is_today(on)
        url = f"{base_url}/nbrfxrates.xml" if today else f"{base_url}/files/xml/years/nbrfxrates{on.year}.xml"
        root = await self.fetch_xml(url)

        target = on.isoformat()
        best = None
        for cube in root.iterfind(".//ns:Cube[@date]", NAMESPACES):
            published = cube.get("date", "")
            if published <= target and (best is None or published > best.get("date")):
                best = cube

        if best is None:
            if not today:
                return self.result(on)
            # The daily file may carry an undated Cube next to PublishingDate
            best = root.find(".//ns:Cube", NAMESPACES)
            if best is None:
                raise ParseFailure(f"No NBR rates found for date {target}", self.service_key)

        published = best.get("date") or root.findtext(".//ns:PublishingDate", namespaces=NAMESPACES)
        actual = parse_date(published) or on

        rates: dict[str, str] = {}
        for rate in best.iterfind("ns:Rate", NAMESPACES):
            multiplier = rate.get("multiplier", "1")
            rates[rate.get("currency")] = div(rate.text, multiplier, self.precision)
        return self.result(actual, rates)
